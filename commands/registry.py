"""
Command Registry
----------------
Ordered collection of palette commands keyed by unique id.

Responsibilities:
- Register / unregister / look up commands
- Rank commands against a query (delegated to search.fuzzy_search)
- Execute a command's action and propagate its outcome

Forbidden:
- Swallowing action failures (the caller owns retry and reporting)
- Holding the lock while an action runs
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Union
import inspect
import logging
import threading
import time

import yaml

from core.errors import CommandMapError, CommandNotFoundError, DuplicateIdentifierError
from search import fuzzy_search

from .navigator import Navigator

Action = Callable[[], Union[None, Awaitable[None]]]


@dataclass
class Command:
    """A named, searchable palette action."""
    id: str
    title: str
    action: Action = field(compare=False)
    description: Optional[str] = None
    keywords: Optional[List[str]] = field(default_factory=list)

    def __post_init__(self):
        self.keywords = list(self.keywords or [])

    def searchable_fields(self) -> List[str]:
        """Title first, then description, then keywords."""
        fields = [self.title]
        if self.description:
            fields.append(self.description)
        fields.extend(self.keywords)
        return fields

    def __repr__(self) -> str:
        return f"Command(id={self.id}, title={self.title})"


@dataclass
class SearchResult:
    """
    A command ranked against a query.

    `matches` are offsets into the field selected by `field_index`
    (0 = title, then description when present, then keywords).
    """
    command: Command
    score: int
    matches: List[int] = field(default_factory=list)
    field_index: int = 0

    @property
    def matched_field(self) -> str:
        """The text the match offsets refer to."""
        return self.command.searchable_fields()[self.field_index]

    @property
    def matched_title(self) -> bool:
        return self.field_index == 0


class CommandRegistry:
    """
    Registry for palette commands.

    Thread-safety: the id -> command mapping is guarded by one lock held
    only while the mapping is read or written. Actions run outside it.
    """

    def __init__(self):
        self._commands: Dict[str, Command] = {}
        self._lock = threading.Lock()
        self._logger = logging.getLogger("palette.commands.registry")

    def register(self, command: Command) -> None:
        """Register a command. Raises DuplicateIdentifierError on id collision."""
        with self._lock:
            if command.id in self._commands:
                raise DuplicateIdentifierError(command.id)
            self._commands[command.id] = command

        self._logger.info(f"Registered command: {command.id}")

    def unregister(self, command_id: str) -> bool:
        """Remove a command. Returns whether anything was removed."""
        with self._lock:
            removed = self._commands.pop(command_id, None) is not None

        if removed:
            self._logger.info(f"Unregistered command: {command_id}")
        return removed

    def get(self, command_id: str) -> Optional[Command]:
        """Get a command by id."""
        with self._lock:
            return self._commands.get(command_id)

    def get_all(self) -> List[Command]:
        """Snapshot of all commands in registration order."""
        with self._lock:
            return list(self._commands.values())

    def search(self, query: str, limit: Optional[int] = None) -> List[SearchResult]:
        """
        Rank commands against `query`.

        A blank query lists every command unranked, in registration order.
        Equal scores keep registration order.
        """
        ranked = fuzzy_search(
            query,
            self.get_all(),
            lambda command: command.searchable_fields(),
            limit=limit,
        )

        self._logger.debug(
            f"Search {query!r}: {len(ranked)} result(s)",
            extra={"query": query, "result_count": len(ranked)},
        )

        return [
            SearchResult(
                command=match.item,
                score=match.score,
                matches=match.matches,
                field_index=match.field_index,
            )
            for match in ranked
        ]

    async def execute(self, command_id: str) -> None:
        """
        Run a command's action.

        Raises CommandNotFoundError for unknown ids. Whatever the action
        raises propagates unchanged.
        """
        command = self.get(command_id)
        if command is None:
            raise CommandNotFoundError(command_id)

        self._logger.info(f"Executing command: {command_id}", extra={"command_id": command_id})
        start = time.perf_counter()

        try:
            outcome = command.action()
            if inspect.isawaitable(outcome):
                await outcome
        except Exception as e:
            self._logger.error(
                f"Command {command_id} failed: {e}",
                extra={"command_id": command_id, "success": False},
            )
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._logger.info(
            f"Command {command_id} completed in {elapsed_ms:.1f}ms",
            extra={"command_id": command_id, "success": True, "execution_time_ms": elapsed_ms},
        )

    def load_from_yaml(
        self,
        path: str,
        navigator: Navigator,
        url_variables: Optional[Mapping[str, str]] = None,
    ) -> int:
        """
        Register the commands declared in a command map file.

        Each declared action is bound to `navigator`. Returns the number
        of commands registered. The whole file is parsed before anything
        is registered, so a malformed entry registers nothing.
        """
        map_path = Path(path)
        if not map_path.exists():
            raise FileNotFoundError(f"Command map not found: {path}")

        with open(map_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise CommandMapError(f"{path}: expected a mapping with a 'commands' list")

        entries = data.get('commands') or []
        if not isinstance(entries, list):
            raise CommandMapError(f"{path}: 'commands' must be a list")

        commands = [
            _parse_command(entry, navigator, url_variables or {})
            for entry in entries
        ]

        for command in commands:
            self.register(command)

        self._logger.info(f"Loaded {len(commands)} commands from {map_path}")
        return len(commands)

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    def __contains__(self, command_id: str) -> bool:
        with self._lock:
            return command_id in self._commands


def _parse_command(
    data: Any,
    navigator: Navigator,
    url_variables: Mapping[str, str],
) -> Command:
    """Parse one command map entry."""
    if not isinstance(data, dict):
        raise CommandMapError(f"Command entry must be a mapping, got {type(data).__name__}")

    try:
        command_id = data['id']
        title = data['title']
        action_spec = data['action']
    except KeyError as e:
        raise CommandMapError(f"Command entry missing field {e.args[0]!r}: {data}") from e

    keywords = data.get('keywords') or []
    if not isinstance(keywords, list):
        keywords = [keywords]

    description = data.get('description')

    return Command(
        id=str(command_id),
        title=str(title),
        description=str(description) if description is not None else None,
        keywords=[str(keyword) for keyword in keywords],
        action=_bind_action(command_id, action_spec, navigator, url_variables),
    )


def _bind_action(
    command_id: str,
    spec: Any,
    navigator: Navigator,
    url_variables: Mapping[str, str],
) -> Action:
    """Turn a declarative action spec into a zero-argument callable."""
    if isinstance(spec, str):
        spec = {'type': spec}
    if not isinstance(spec, dict) or 'type' not in spec:
        raise CommandMapError(f"{command_id}: action must declare a type")

    action_type = spec['type']

    if action_type == 'compose':
        return navigator.compose_new_message

    if action_type == 'options_page':
        return navigator.open_options_page

    if action_type == 'open_url':
        if 'url' not in spec:
            raise CommandMapError(f"{command_id}: open_url action requires a url")
        try:
            url = str(spec['url']).format(**url_variables)
        except KeyError as e:
            raise CommandMapError(f"{command_id}: unknown URL variable {e.args[0]!r}") from e
        return lambda: navigator.open_url(url)

    raise CommandMapError(f"{command_id}: unknown action type {action_type!r}")
