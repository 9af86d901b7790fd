"""
Navigator Tests
---------------
Tests for the webbrowser-backed navigator.
"""

import asyncio
import webbrowser

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from commands.navigator import Navigator, RecordingNavigator, WebbrowserNavigator
from core.errors import ActionFailure


@pytest.fixture
def opened(monkeypatch):
    """Capture URLs instead of opening them."""
    urls = []

    def _open(url, *args, **kwargs):
        urls.append(url)
        return True

    monkeypatch.setattr(webbrowser, "open", _open)
    return urls


class TestWebbrowserNavigator:
    """URL handoff to the system browser / mail client."""

    def test_open_url(self, opened):
        asyncio.run(WebbrowserNavigator().open_url("about:addressbook"))
        assert opened == ["about:addressbook"]

    def test_compose_uses_mailto(self, opened):
        asyncio.run(WebbrowserNavigator().compose_new_message())
        assert opened == ["mailto:"]

    def test_options_page(self, opened):
        asyncio.run(WebbrowserNavigator(options_url="about:config").open_options_page())
        assert opened == ["about:config"]

    def test_refused_open_is_action_failure(self, monkeypatch):
        monkeypatch.setattr(webbrowser, "open", lambda url, *a, **k: False)

        with pytest.raises(ActionFailure, match="about:blank"):
            asyncio.run(WebbrowserNavigator().open_url("about:blank"))

    def test_blocked_in_tests_by_default(self):
        """The autouse fixture turns stray browser opens into errors."""
        with pytest.raises(RuntimeError):
            asyncio.run(WebbrowserNavigator().open_url("about:blank"))


class TestProtocol:
    """Both navigators satisfy the Navigator protocol."""

    def test_runtime_checkable(self):
        assert isinstance(WebbrowserNavigator(), Navigator)
        assert isinstance(RecordingNavigator(), Navigator)
