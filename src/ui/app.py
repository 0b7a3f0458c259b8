"""
Interactive app loop and non-interactive commands.

File: ui/app.py
Created: 2026-01-19
Last Modified: 2026-01-22
"""

import logging

from rich.panel import Panel
from rich.prompt import Confirm

from ..database import ContactDatabase, init_local_database
from ..gemini import GeminiClient
from ..models import ConfigurationError, GreetingStyle
from ..session import AppConfig, AppController, AppState, ContactStore, View
from .screens import (
    console,
    dashboard_screen,
    import_screen,
    memory_input_screen,
    preview_screen,
    render_contacts,
    run_batch_with_progress,
)

log = logging.getLogger(__name__)


def _confirm(message: str) -> bool:
    return Confirm.ask(message, default=False)


def _notify(message: str) -> None:
    console.print(Panel.fit(f"[bold green]{message}[/]", border_style="green"))


async def build_controller(config: AppConfig) -> AppController:
    """
    Initialize the database and Gemini client and load contacts.

    Raises:
        ConfigurationError: If no Gemini API key is configured
    """
    await init_local_database(config.db_path)
    try:
        client = GeminiClient(api_key=config.gemini_api_key, model=config.model)
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    controller = AppController(
        gateway=ContactDatabase(config.db_path),
        generator=client,
        confirm=_confirm,
        notify=_notify,
        batch_delay=config.batch_delay,
    )
    await controller.load()
    return controller


async def run_app(config: AppConfig) -> None:
    """Run the interactive app until the user quits."""
    controller = await build_controller(config)
    tab = "pending"
    style, index = GreetingStyle.FORMAL, 0
    last_selected = None

    while True:
        state = controller.state
        if state.nav.selected_id != last_selected:
            # New contact opened, start on the formal tab
            style, index = GreetingStyle.FORMAL, 0
            last_selected = state.nav.selected_id

        view = state.nav.view
        if view is View.DASHBOARD:
            next_tab = await dashboard_screen(controller, tab)
            if next_tab is None:
                console.print("[dim]Goodbye![/]")
                break
            tab = next_tab
        elif view is View.IMPORT:
            await import_screen(controller)
        elif view is View.MEMORY_INPUT:
            await memory_input_screen(controller)
        elif view is View.PREVIEW:
            style, index = await preview_screen(controller, style, index)


async def run_command(config: AppConfig, command: str) -> bool:
    """
    Run a non-interactive command.

    Returns:
        False if the command is unknown
    """
    if command == "list":
        await init_local_database(config.db_path)
        contacts = await ContactDatabase(config.db_path).list()
        render_contacts(contacts, AppState(store=ContactStore.of(contacts)), "Contacts")
        return True
    if command == "generate-all":
        controller = await build_controller(config)
        await run_batch_with_progress(controller)
        return True
    return False
