"""
FastAPI Service Bus
-------------------
Local HTTP surface for the palette UI process.

Exposes the registry (list, search, execute) and a raw message endpoint
that accepts the same messages as MessageDispatcher.

This is NOT an external-facing API - bind it to localhost only.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field

from core.errors import CommandNotFoundError

from .logging import RequestContext, get_logger
from .message_bus import (
    CommandInfo,
    ExecuteResponse,
    MessageDispatcher,
    SearchResponse,
)

API_VERSION = "0.1.0"


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    commands_loaded: int
    version: str = API_VERSION
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


class PaletteServiceBus:
    """
    Service bus wrapping one MessageDispatcher.

    Routes:
    - GET  /health
    - GET  /commands
    - GET  /commands/search?q=...&limit=...
    - POST /commands/{command_id}/execute
    - POST /messages
    """

    def __init__(self, dispatcher: MessageDispatcher):
        self._dispatcher = dispatcher
        self._logger = get_logger("infra.service_bus")
        self._app: Optional[FastAPI] = None

    @property
    def app(self) -> Optional[FastAPI]:
        return self._app

    def create_app(self) -> FastAPI:
        """Create and configure the FastAPI application."""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            self._logger.info(
                f"Service bus starting with {len(self._dispatcher.registry)} commands"
            )
            yield
            self._logger.info("Service bus shutting down")

        app = FastAPI(
            title="Command Palette API",
            description="Local API for the mail command palette",
            version=API_VERSION,
            lifespan=lifespan,
        )

        self._register_routes(app)

        self._app = app
        return app

    def _register_routes(self, app: FastAPI) -> None:
        """Register all API routes."""
        dispatcher = self._dispatcher

        @app.get("/health", response_model=HealthResponse, tags=["System"])
        async def health_check():
            """Health check endpoint."""
            return HealthResponse(status="healthy", commands_loaded=len(dispatcher.registry))

        @app.get("/commands", response_model=List[CommandInfo], tags=["Commands"])
        async def list_commands():
            """List every command in registration order."""
            return dispatcher.get_commands().commands

        @app.get("/commands/search", response_model=SearchResponse, tags=["Commands"])
        async def search_commands(
            q: str = Query("", description="Search text"),
            limit: Optional[int] = Query(None, ge=1),
        ):
            """Rank commands against a query."""
            with RequestContext():
                return dispatcher.search_commands(q, limit)

        @app.post(
            "/commands/{command_id}/execute",
            response_model=ExecuteResponse,
            tags=["Commands"],
        )
        async def execute_command(command_id: str):
            """Execute a command by id."""
            with RequestContext():
                try:
                    await dispatcher.registry.execute(command_id)
                except CommandNotFoundError as e:
                    dispatcher.error_handler.handle_exception(e, command_id=command_id)
                    raise HTTPException(status_code=404, detail=str(e))
                except Exception as e:
                    message = dispatcher.error_handler.handle_exception(e, command_id=command_id)
                    raise HTTPException(status_code=500, detail=message)

            return ExecuteResponse(success=True)

        @app.post("/messages", tags=["Messages"])
        async def handle_message(message: Dict[str, Any] = Body(...)):
            """Dispatch a raw palette message."""
            return await dispatcher.dispatch(message)


def create_app(dispatcher: MessageDispatcher) -> FastAPI:
    """Create the FastAPI application."""
    return PaletteServiceBus(dispatcher).create_app()


async def run_server(
    app: FastAPI,
    host: str = "127.0.0.1",
    port: int = 8000,
    log_level: str = "info",
) -> None:
    """Run the service bus server."""
    import uvicorn

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=log_level,
    )
    server = uvicorn.Server(config)
    await server.serve()
