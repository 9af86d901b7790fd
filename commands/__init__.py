# Commands module - Command registry and host navigation capability
# The registry ranks and runs commands; it never touches host APIs directly

from .registry import CommandRegistry, Command, SearchResult
from .navigator import Navigator, WebbrowserNavigator, RecordingNavigator

__all__ = [
    "CommandRegistry",
    "Command",
    "SearchResult",
    "Navigator",
    "WebbrowserNavigator",
    "RecordingNavigator",
]
