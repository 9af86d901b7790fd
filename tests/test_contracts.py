"""
Contract Tests
---------------
API surface tests.

These tests verify:
- Public symbols exist
- Required types are exported
- Breaking changes cause test failure
"""

import pytest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))


class TestSearchAPI:
    """Verify search exports."""

    def test_exports_exist(self):
        from search import score, fuzzy_search, FuzzyMatch

        assert callable(score)
        assert callable(fuzzy_search)
        assert FuzzyMatch is not None


class TestCommandsAPI:
    """Verify commands exports."""

    def test_exports_exist(self):
        from commands import (
            CommandRegistry,
            Command,
            SearchResult,
            Navigator,
            WebbrowserNavigator,
            RecordingNavigator,
        )

        assert CommandRegistry is not None
        assert SearchResult is not None

    def test_registry_operations(self):
        from commands import CommandRegistry

        for name in ("register", "unregister", "get", "get_all", "search", "execute", "load_from_yaml"):
            assert hasattr(CommandRegistry, name), name


class TestCoreErrorsAPI:
    """Verify core.errors exports."""

    def test_exports_exist(self):
        from core.errors import (
            ErrorCategory,
            PaletteError,
            DuplicateIdentifierError,
            CommandNotFoundError,
            ActionFailure,
            CommandMapError,
            ErrorReport,
            ErrorHandler,
        )

        assert ErrorHandler is not None

    def test_error_category_values(self):
        from core.errors import ErrorCategory

        # These values must remain stable
        assert hasattr(ErrorCategory, 'DUPLICATE_IDENTIFIER')
        assert hasattr(ErrorCategory, 'COMMAND_NOT_FOUND')
        assert hasattr(ErrorCategory, 'ACTION_FAILURE')


class TestInfraAPI:
    """Verify infra exports."""

    def test_exports_exist(self):
        from infra import (
            ConfigManager,
            PaletteConfig,
            load_config,
            get_logger,
            configure_logging,
            RequestContext,
            MessageDispatcher,
            PaletteServiceBus,
            create_app,
        )

        assert MessageDispatcher is not None
        assert PaletteServiceBus is not None

    def test_message_types(self):
        from infra.message_bus import parse_message

        for raw in (
            {"type": "getCommands"},
            {"type": "searchCommands", "query": "x"},
            {"type": "executeCommand", "commandId": "x"},
        ):
            assert parse_message(raw).type == raw["type"]
