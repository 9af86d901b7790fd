# Core module - Error taxonomy and reporting shared by every layer

from .errors import (
    ErrorCategory, PaletteError,
    DuplicateIdentifierError, CommandNotFoundError,
    ActionFailure, CommandMapError,
    ErrorReport, ErrorHandler, classify_exception,
)

__all__ = [
    "ErrorCategory", "PaletteError",
    "DuplicateIdentifierError", "CommandNotFoundError",
    "ActionFailure", "CommandMapError",
    "ErrorReport", "ErrorHandler", "classify_exception",
]
