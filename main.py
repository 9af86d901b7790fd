#!/usr/bin/env python3
"""
Mail Command Palette
====================

Main entry point for the command palette host.

Usage:
    python main.py                      # Interactive search loop
    python main.py --query "open"       # Print ranked results and exit
    python main.py --list               # List every command
    python main.py --execute open-settings
    python main.py --serve --port 8000  # Run the local service bus
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List

# Ensure project root is in path
sys.path.insert(0, str(Path(__file__).parent))

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from commands import CommandRegistry, Navigator, SearchResult, WebbrowserNavigator
from core.errors import ErrorHandler
from infra.config import PaletteConfig, load_config
from infra.logging import configure_logging, get_logger
from infra.message_bus import MessageDispatcher


console = Console()


def setup_logging(config: PaletteConfig) -> None:
    """Configure logging with rich console output and optional JSON file."""
    level = getattr(logging, config.log_level, logging.INFO)
    configure_logging(
        level=level,
        log_dir=config.log_dir,
        console=False,
        file=config.log_dir is not None,
        force=True,
    )
    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setLevel(level)
    logging.getLogger("palette").addHandler(handler)


def build_registry(config: PaletteConfig, navigator: Navigator) -> CommandRegistry:
    """Create a registry populated from the configured command map."""
    registry = CommandRegistry()
    registry.load_from_yaml(config.command_map, navigator, config.url_variables)
    return registry


def highlight(text: str, matches: List[int]) -> Text:
    """Render `text` with the matched offsets emphasized."""
    rendered = Text(text)
    for offset in matches:
        if 0 <= offset < len(text):
            rendered.stylize("bold yellow", offset, offset + 1)
    return rendered


def print_results(results: List[SearchResult]) -> None:
    """Print ranked results as a table."""
    if not results:
        console.print("[dim]No commands found[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Command")
    table.add_column("Id", style="dim")
    table.add_column("Matched on", style="dim")

    for result in results:
        command = result.command
        # Offsets only map onto the title when the title was the best field
        title = highlight(command.title, result.matches if result.matched_title else [])
        matched_on = "" if result.matched_title or not result.matches else result.matched_field
        table.add_row(str(result.score), title, command.id, matched_on)

    console.print(table)


def execute(dispatcher: MessageDispatcher, command_id: str) -> bool:
    """Execute a command, reporting the outcome on the console."""
    response = asyncio.run(dispatcher.execute_command(command_id))
    if response.success:
        console.print(f"[green]Executed[/green] {command_id}")
    else:
        console.print(f"[bold red]Error:[/bold red] {response.error}")
    return response.success


def run_interactive(dispatcher: MessageDispatcher, max_results=None) -> None:
    """Search-as-you-type loop on stdin."""
    console.print(
        "[bold cyan]Command Palette[/bold cyan] "
        "[dim](empty line lists all, !<id> executes, q quits)[/dim]"
    )
    registry = dispatcher.registry

    while True:
        try:
            text = console.input("\n[bold cyan]>[/bold cyan] ")
        except EOFError:
            break

        if text.strip().lower() in ("q", "quit", "exit"):
            break

        if text.startswith("!"):
            execute(dispatcher, text[1:].strip())
            continue

        print_results(registry.search(text, limit=max_results))


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Mail Command Palette - fuzzy command search"
    )
    parser.add_argument(
        "--config", "-c",
        default="config.yaml",
        help="Path to configuration file"
    )
    parser.add_argument("--query", "-q", help="Print ranked results for a query and exit")
    parser.add_argument("--list", action="store_true", help="List all commands and exit")
    parser.add_argument("--execute", "-x", metavar="ID", help="Execute a command by id")
    parser.add_argument("--serve", action="store_true", help="Run the local service bus")
    parser.add_argument("--host", help="Service bus host (overrides config)")
    parser.add_argument("--port", type=int, help="Service bus port (overrides config)")
    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides config)"
    )

    args = parser.parse_args()

    config = load_config(args.config)
    if args.log_level:
        config.log_level = args.log_level

    setup_logging(config)
    logger = get_logger("main")

    try:
        navigator = WebbrowserNavigator(options_url=config.options_url)
        registry = build_registry(config, navigator)
        dispatcher = MessageDispatcher(registry, ErrorHandler(), config.max_results)

        if args.serve:
            from infra.service_bus import create_app, run_server

            host = args.host or config.host
            port = args.port or config.port
            console.print(f"[bold green]Command Palette API[/bold green] on http://{host}:{port}")
            asyncio.run(run_server(
                create_app(dispatcher), host=host, port=port, log_level=config.log_level.lower()
            ))
            return 0

        if args.execute:
            return 0 if execute(dispatcher, args.execute) else 1

        if args.list:
            print_results(registry.search(""))
            return 0

        if args.query is not None:
            print_results(registry.search(args.query, limit=config.max_results))
            return 0

        run_interactive(dispatcher, config.max_results)
        return 0

    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        return 130
    except Exception as e:
        logger.exception("Fatal error")
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
