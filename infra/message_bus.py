"""
Message Bus
-----------
Routes host messages from the palette UI into the command registry.

Messages (discriminated by `type`):
    {"type": "getCommands"}
    {"type": "searchCommands", "query": "..."}
    {"type": "executeCommand", "commandId": "..."}

Every reply is a plain dict ready to be serialized back to the UI process.
Failures never escape `dispatch`: they become {"success": false, "error": ...}.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from commands.registry import Command, CommandRegistry, SearchResult
from core.errors import ErrorHandler, ErrorReport, ErrorCategory

from .logging import RequestContext, get_logger


# Request Models

class GetCommandsMessage(BaseModel):
    """List every command, unranked."""
    type: Literal["getCommands"]


class SearchCommandsMessage(BaseModel):
    """Rank commands against a query."""
    type: Literal["searchCommands"]
    query: str = ""
    limit: Optional[int] = Field(None, ge=1)


class ExecuteCommandMessage(BaseModel):
    """Run one command by id."""
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["executeCommand"]
    command_id: str = Field(..., alias="commandId", min_length=1)


PaletteMessage = Annotated[
    Union[GetCommandsMessage, SearchCommandsMessage, ExecuteCommandMessage],
    Field(discriminator="type"),
]

_message_adapter: TypeAdapter = TypeAdapter(PaletteMessage)


# Response Models

class CommandInfo(BaseModel):
    """Serializable view of a command (the action stays in-process)."""
    id: str
    title: str
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)

    @classmethod
    def from_command(cls, command: Command) -> "CommandInfo":
        return cls(
            id=command.id,
            title=command.title,
            description=command.description,
            keywords=list(command.keywords),
        )


class SearchResultInfo(BaseModel):
    """Serializable view of a search result."""
    model_config = ConfigDict(populate_by_name=True)

    command: CommandInfo
    score: int
    matches: List[int]
    field_index: int = Field(0, alias="fieldIndex")

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultInfo":
        return cls(
            command=CommandInfo.from_command(result.command),
            score=result.score,
            matches=list(result.matches),
            field_index=result.field_index,
        )


class CommandsResponse(BaseModel):
    commands: List[CommandInfo]


class SearchResponse(BaseModel):
    results: List[SearchResultInfo]


class ExecuteResponse(BaseModel):
    success: bool
    error: Optional[str] = None


def parse_message(raw: Any) -> BaseModel:
    """Validate a raw host message. Raises pydantic.ValidationError."""
    return _message_adapter.validate_python(raw)


class MessageDispatcher:
    """
    Dispatches host messages to a CommandRegistry.

    One dispatcher per registry; the host owns both.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        error_handler: Optional[ErrorHandler] = None,
        max_results: Optional[int] = None,
    ):
        self._registry = registry
        self._errors = error_handler or ErrorHandler()
        self._max_results = max_results
        self._logger = get_logger("infra.message_bus")

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def error_handler(self) -> ErrorHandler:
        return self._errors

    async def dispatch(self, raw: Any) -> Dict[str, Any]:
        """Handle one raw message and return the reply dict."""
        with RequestContext():
            try:
                message = parse_message(raw)
            except ValidationError as e:
                self._logger.warning(f"Rejected message: {e.error_count()} validation error(s)")
                report = ErrorReport(
                    category=ErrorCategory.VALIDATION_ERROR,
                    message=_summarize_validation_error(e),
                    details={"message": raw if isinstance(raw, dict) else repr(raw)},
                )
                return ExecuteResponse(success=False, error=self._errors.handle(report)).model_dump()

            if isinstance(message, GetCommandsMessage):
                return self.get_commands().model_dump()

            if isinstance(message, SearchCommandsMessage):
                return self.search_commands(message.query, message.limit).model_dump(by_alias=True)

            return (await self.execute_command(message.command_id)).model_dump()

    def get_commands(self) -> CommandsResponse:
        """All commands in registration order."""
        return CommandsResponse(
            commands=[CommandInfo.from_command(cmd) for cmd in self._registry.get_all()]
        )

    def search_commands(self, query: str, limit: Optional[int] = None) -> SearchResponse:
        """Ranked results for a query, capped by `limit` or the configured maximum."""
        results = self._registry.search(query, limit=limit or self._max_results)
        return SearchResponse(results=[SearchResultInfo.from_result(r) for r in results])

    async def execute_command(self, command_id: str) -> ExecuteResponse:
        """Run a command and report the outcome."""
        try:
            await self._registry.execute(command_id)
        except Exception as e:
            message = self._errors.handle_exception(e, command_id=command_id)
            return ExecuteResponse(success=False, error=message)

        return ExecuteResponse(success=True)


def _summarize_validation_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "message"
    return f"{location}: {first.get('msg', 'invalid value')}"
