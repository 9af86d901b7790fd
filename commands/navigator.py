"""
Navigator
---------
Host capability used by command actions.

The registry and search core never touch host APIs. Actions that need to
open something go through a Navigator, so the same command map works for
the CLI (system browser / mail client) and for tests (recorded calls).
"""

from typing import List, Optional, Protocol, Tuple, runtime_checkable
import asyncio
import logging
import webbrowser

from core.errors import ActionFailure


@runtime_checkable
class Navigator(Protocol):
    """Capabilities a host exposes to command actions."""

    async def open_url(self, url: str) -> None:
        ...

    async def compose_new_message(self) -> None:
        ...

    async def open_options_page(self) -> None:
        ...


class WebbrowserNavigator:
    """
    Navigator backed by the standard `webbrowser` module.

    Compose opens a bare mailto: link, which hands off to the system's
    default mail client.
    """

    def __init__(self, options_url: str = "about:preferences"):
        self._options_url = options_url
        self._logger = logging.getLogger("palette.commands.navigator")

    async def open_url(self, url: str) -> None:
        self._logger.info(f"Opening URL: {url}")
        opened = await asyncio.to_thread(webbrowser.open, url)
        if not opened:
            raise ActionFailure(f"Could not open {url}")

    async def compose_new_message(self) -> None:
        await self.open_url("mailto:")

    async def open_options_page(self) -> None:
        await self.open_url(self._options_url)


class RecordingNavigator:
    """Navigator that records calls instead of performing them."""

    def __init__(self, fail_with: Optional[Exception] = None):
        self.calls: List[Tuple[str, ...]] = []
        self._fail_with = fail_with

    async def _record(self, *call: str) -> None:
        self.calls.append(call)
        if self._fail_with is not None:
            raise self._fail_with

    async def open_url(self, url: str) -> None:
        await self._record("open_url", url)

    async def compose_new_message(self) -> None:
        await self._record("compose_new_message")

    async def open_options_page(self) -> None:
        await self._record("open_options_page")
