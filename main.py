"""
Main entry point for Spring Greetings.

Interactive CLI for writing personalized Year of the Horse greetings, plus a
couple of non-interactive commands.

File: main.py
Created: 2025-12-23
Last Modified: 2026-01-22
"""

import asyncio
import logging
import sys

from dotenv import load_dotenv
from rich import box
from rich.console import Console
from rich.table import Table

console = Console()

load_dotenv()

# Non-interactive command definitions
COMMANDS = {
    "list": {
        "description": "Print every contact and its greeting status",
        "requires": None,
    },
    "generate-all": {
        "description": "Generate greetings for pending contacts (or everyone)",
        "requires": "GEMINI_API_KEY",
    },
}


def show_usage():
    """Display the available commands."""
    table = Table(box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("Command", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Requires", style="yellow")

    table.add_row("(none)", "Interactive app", "GEMINI_API_KEY")
    for name, command in COMMANDS.items():
        table.add_row(name, command["description"], command["requires"] or "-")

    console.print(table)


async def main():
    """Main entry point: interactive app, or one command from argv."""
    from src.models import GreetingsError
    from src.session import AppConfig, configure_logging
    from src.ui import run_app, run_command

    try:
        config = AppConfig.from_env()
    except ValueError as e:
        console.print(f"[red]{e}[/]")
        return

    configure_logging(config.log_dir)
    log = logging.getLogger(__name__)
    log.info(f"Starting with database {config.db_path}, model {config.model}")

    try:
        # Check for command-line argument for non-interactive use
        if len(sys.argv) > 1:
            command = sys.argv[1].lower()
            if command not in COMMANDS or not await run_command(config, command):
                console.print(f"[red]Unknown command: {command}[/]")
                show_usage()
            return

        await run_app(config)
    except GreetingsError as e:
        log.error(f"Fatal error: {e}")
        console.print(f"[red]{e}[/]")
    except (KeyboardInterrupt, EOFError):
        console.print("\n[dim]Goodbye![/]")


if __name__ == "__main__":
    asyncio.run(main())
