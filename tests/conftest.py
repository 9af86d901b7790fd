"""
Palette Test Configuration
--------------------------
Shared fixtures and configuration for all tests.
"""

import sys
import webbrowser
from pathlib import Path
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from commands import Command, CommandRegistry, RecordingNavigator


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_browser_open(monkeypatch):
    """
    Block webbrowser.open() during tests.

    If something tries to open a browser or mail client, it raises RuntimeError.
    """
    def _blocked(*args, **kwargs):
        raise RuntimeError(
            "webbrowser.open() is forbidden during tests. "
            "Use RecordingNavigator or mock it."
        )

    monkeypatch.setattr(webbrowser, "open", _blocked)
    monkeypatch.setattr(webbrowser, "open_new", _blocked)
    monkeypatch.setattr(webbrowser, "open_new_tab", _blocked)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root path."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def command_map_path(project_root):
    """The bundled default command map."""
    return str(project_root / "commands" / "command_map.yaml")


@pytest.fixture
def navigator():
    """A navigator that records calls."""
    return RecordingNavigator()


@pytest.fixture
def calls():
    """Shared list that sample command actions append their id to."""
    return []


@pytest.fixture
def registry(calls):
    """
    Registry with the three reference commands:
    a: Compose New Message, b: Open Address Book, c: Open Settings.
    """
    registry = CommandRegistry()
    registry.register(Command(id="a", title="Compose New Message", action=lambda: calls.append("a")))
    registry.register(Command(id="b", title="Open Address Book", action=lambda: calls.append("b")))
    registry.register(Command(id="c", title="Open Settings", action=lambda: calls.append("c")))
    return registry
