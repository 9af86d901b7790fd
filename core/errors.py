"""
Error Handling Module
---------------------
Typed palette errors and user-facing error reporting.

The registry raises; the host layer reports. No automatic retries:
retry policy belongs to the caller or to the action itself.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging
import traceback


class ErrorCategory(Enum):
    """Categories of errors for reporting decisions."""
    DUPLICATE_IDENTIFIER = auto()  # Command id already registered
    COMMAND_NOT_FOUND = auto()     # No command with that id
    ACTION_FAILURE = auto()        # A command's action raised
    VALIDATION_ERROR = auto()      # Malformed request or command map
    SYSTEM_ERROR = auto()          # Internal error


class PaletteError(Exception):
    """Base class for all command palette errors."""

    category = ErrorCategory.SYSTEM_ERROR


class DuplicateIdentifierError(PaletteError):
    """Raised when registering a command whose id is already taken."""

    category = ErrorCategory.DUPLICATE_IDENTIFIER

    def __init__(self, command_id: str):
        self.command_id = command_id
        super().__init__(f'Command with id "{command_id}" already exists')


class CommandNotFoundError(PaletteError):
    """Raised when executing an id with no registered command."""

    category = ErrorCategory.COMMAND_NOT_FOUND

    def __init__(self, command_id: str):
        self.command_id = command_id
        super().__init__(f'Command with id "{command_id}" not found')


class ActionFailure(PaletteError):
    """
    Failure raised by a command action.

    Actions may raise any exception; this type exists for actions that
    want to signal a host-side failure (e.g. a navigator that could not
    open a page). Whatever the action raises reaches the caller unchanged.
    """

    category = ErrorCategory.ACTION_FAILURE


class CommandMapError(PaletteError):
    """Raised when a command map file is malformed."""

    category = ErrorCategory.VALIDATION_ERROR


def classify_exception(exception: BaseException) -> ErrorCategory:
    """Map an exception to an error category."""
    if isinstance(exception, PaletteError):
        return exception.category
    # Anything else escaping an action is still an action failure
    return ErrorCategory.ACTION_FAILURE


@dataclass
class ErrorReport:
    """
    Structured error with metadata.

    Used for consistent reporting across the message bus and service bus.
    """
    category: ErrorCategory
    message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)
    stack_trace: Optional[str] = None

    @classmethod
    def from_exception(
        cls,
        exception: BaseException,
        details: Optional[Dict] = None
    ) -> "ErrorReport":
        """Create a report from an exception."""
        return cls(
            category=classify_exception(exception),
            message=str(exception),
            details=details,
            stack_trace="".join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            )),
        )

    def __repr__(self) -> str:
        return f"ErrorReport({self.category.name}: {self.message})"


class ErrorHandler:
    """
    Central error handler with logging and user-facing messages.
    """

    def __init__(self, max_history: int = 100):
        self._logger = logging.getLogger("palette.errors")
        self._error_history: List[ErrorReport] = []
        self._max_history = max_history

    def handle(self, error: ErrorReport) -> str:
        """
        Handle an error and return a user-friendly message.
        """
        self._log_error(error)

        self._error_history.append(error)
        if len(self._error_history) > self._max_history:
            self._error_history.pop(0)

        return self._get_user_message(error)

    def handle_exception(self, exception: BaseException, **details: Any) -> str:
        """Build a report from an exception and handle it."""
        return self.handle(ErrorReport.from_exception(exception, details or None))

    def _log_error(self, error: ErrorReport) -> None:
        """Log error with appropriate level."""
        level_map = {
            ErrorCategory.DUPLICATE_IDENTIFIER: logging.WARNING,
            ErrorCategory.COMMAND_NOT_FOUND: logging.WARNING,
            ErrorCategory.VALIDATION_ERROR: logging.WARNING,
            ErrorCategory.ACTION_FAILURE: logging.ERROR,
            ErrorCategory.SYSTEM_ERROR: logging.CRITICAL,
        }

        level = level_map.get(error.category, logging.ERROR)

        self._logger.log(
            level,
            f"{error.category.name}: {error.message}",
            extra={"details": error.details}
        )

        if error.stack_trace and level >= logging.ERROR:
            self._logger.debug(f"Stack trace:\n{error.stack_trace}")

    def _get_user_message(self, error: ErrorReport) -> str:
        """Generate user-friendly error message."""
        messages = {
            ErrorCategory.DUPLICATE_IDENTIFIER: error.message,
            ErrorCategory.COMMAND_NOT_FOUND: error.message,
            ErrorCategory.VALIDATION_ERROR: f"Invalid request: {error.message}",
            ErrorCategory.ACTION_FAILURE: error.message or "The command failed.",
            ErrorCategory.SYSTEM_ERROR: "Something went wrong internally.",
        }

        return messages.get(error.category, "An error occurred.")

    def get_error_stats(self) -> Dict[str, int]:
        """Get error counts per category."""
        stats: Dict[str, int] = {}
        for error in self._error_history:
            key = error.category.name
            stats[key] = stats.get(key, 0) + 1
        return stats

    @property
    def history(self) -> List[ErrorReport]:
        return list(self._error_history)

    def clear_history(self) -> None:
        """Clear error history."""
        self._error_history.clear()
