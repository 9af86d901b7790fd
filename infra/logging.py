"""
Palette Centralized Logging
---------------------------
Structured logging with request_id propagation.

Design:
- Every host message (getCommands / searchCommands / executeCommand) gets a request_id
- request_id propagates through: dispatcher -> registry -> action
- Console output (colored) and file output (JSON lines)
- Severity discipline: INFO=state change, WARNING=rejected request, ERROR=action failed

Usage:
    from infra.logging import get_logger, RequestContext

    logger = get_logger("commands.registry")

    with RequestContext() as request_id:
        logger.info("Executing command")
"""

import contextvars
import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

NAMESPACE = "palette"

_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def generate_request_id() -> str:
    """Generate a unique request ID."""
    return f"req_{uuid.uuid4().hex[:12]}"


def get_request_id() -> Optional[str]:
    """Get the current request ID from context."""
    return _request_id_var.get()


class RequestContext:
    """
    Context manager for request scoping.

    Usage:
        with RequestContext() as request_id:
            # All logs within this block carry request_id
            logger.info("Searching...")
    """

    def __init__(self, request_id: Optional[str] = None):
        self._request_id = request_id or generate_request_id()
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _request_id_var.set(self._request_id)
        return self._request_id

    def __exit__(self, *args) -> None:
        if self._token is not None:
            _request_id_var.reset(self._token)
            self._token = None


class RequestIdFilter(logging.Filter):
    """Logging filter that adds request_id to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured file logging."""

    EXTRA_KEYS = ("command_id", "query", "result_count", "execution_time_ms", "success")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                log_entry[key] = getattr(record, key)

        return json.dumps(log_entry)


class ConsoleHandler(logging.StreamHandler):
    """Console handler with ANSI level colors."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, stream=None):
        super().__init__(stream or sys.stderr)

    def format(self, record: logging.LogRecord) -> str:
        request_id = getattr(record, "request_id", "-")
        color = self.LEVEL_COLORS.get(record.levelname, "")

        # Format: [LEVEL] [request_id] logger: message
        request_str = f"[{request_id}] " if request_id != "-" else ""
        return (
            f"{color}[{record.levelname:7}]{self.RESET} "
            f"{request_str}{record.name}: {record.getMessage()}"
        )


class FileRotatingHandler(logging.FileHandler):
    """File handler with size-based rotation."""

    MAX_BYTES = 5 * 1024 * 1024  # 5 MB
    BACKUP_COUNT = 3

    def __init__(self, filename: str, max_bytes: Optional[int] = None,
                 backup_count: Optional[int] = None):
        self._base_path = Path(filename)
        self._max_bytes = max_bytes or self.MAX_BYTES
        self._backup_count = backup_count or self.BACKUP_COUNT

        self._base_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(str(self._base_path), mode="a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if self._base_path.exists() and self._base_path.stat().st_size > self._max_bytes:
                self._rotate()
        except OSError:
            self.handleError(record)

        super().emit(record)

    def _rotate(self) -> None:
        """Rotate log files."""
        self.close()

        for i in range(self._backup_count - 1, 0, -1):
            src = self._base_path.with_suffix(f".{i}.log")
            dst = self._base_path.with_suffix(f".{i + 1}.log")
            if src.exists():
                src.replace(dst)

        if self._base_path.exists():
            self._base_path.replace(self._base_path.with_suffix(".1.log"))

        self.stream = self._open()


_logging_initialized = False


def configure_logging(
    level: int = logging.INFO,
    log_dir: Optional[str] = None,
    console: bool = True,
    file: bool = False,
    force: bool = False,
) -> None:
    """
    Configure the palette logging system.

    Args:
        level: Logging level (default INFO)
        log_dir: Directory for log files (default: ./logs)
        console: Enable console output
        file: Enable JSON file output
        force: Reconfigure even if already configured
    """
    global _logging_initialized

    if _logging_initialized and not force:
        return

    root_logger = logging.getLogger(NAMESPACE)
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    request_filter = RequestIdFilter()

    if console:
        console_handler = ConsoleHandler()
        console_handler.setLevel(level)
        console_handler.addFilter(request_filter)
        root_logger.addHandler(console_handler)

    if file:
        log_path = Path(log_dir) if log_dir else Path("logs")
        file_handler = FileRotatingHandler(str(log_path / "palette.log"))
        file_handler.setLevel(logging.DEBUG)  # File gets everything
        file_handler.setFormatter(JSONFormatter())
        file_handler.addFilter(request_filter)
        root_logger.addHandler(file_handler)

    _logging_initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger in the palette namespace.

    Args:
        name: Logger name (prefixed with 'palette.' if not already)
    """
    if not name.startswith(NAMESPACE):
        name = f"{NAMESPACE}.{name}"

    return logging.getLogger(name)
