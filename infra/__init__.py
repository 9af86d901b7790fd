# Infrastructure module - Config, logging, and the host-facing message/service buses
# Everything here is glue around commands.CommandRegistry

from .config import ConfigManager, PaletteConfig, load_config
from .logging import (
    get_logger, configure_logging, RequestContext,
    get_request_id, generate_request_id
)
from .message_bus import (
    MessageDispatcher, parse_message,
    GetCommandsMessage, SearchCommandsMessage, ExecuteCommandMessage,
    CommandInfo, SearchResultInfo,
)
from .service_bus import PaletteServiceBus, create_app, run_server

__all__ = [
    # Config
    "ConfigManager",
    "PaletteConfig",
    "load_config",
    # Logging
    "get_logger",
    "configure_logging",
    "RequestContext",
    "get_request_id",
    "generate_request_id",
    # Message bus
    "MessageDispatcher",
    "parse_message",
    "GetCommandsMessage",
    "SearchCommandsMessage",
    "ExecuteCommandMessage",
    "CommandInfo",
    "SearchResultInfo",
    # Service bus
    "PaletteServiceBus",
    "create_app",
    "run_server",
]
