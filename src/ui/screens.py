"""
Rich console screens, one per navigation view.

Each screen renders the current state, asks for one action and calls the
controller. Errors raised by the controller are shown in red and leave the
user on the same screen.

File: ui/screens.py
Created: 2026-01-19
Last Modified: 2026-01-22
"""

import logging
from pathlib import Path
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.prompt import Confirm, Prompt
from rich.table import Table

from ..gemini import guess_mime_type
from ..models import (
    PRESET_RELATIONSHIPS,
    Contact,
    GenerationFailed,
    GreetingStyle,
    GreetingsError,
)
from ..session import AppController, AppState, revise_memories

log = logging.getLogger(__name__)
console = Console()

STYLE_LABELS = {
    GreetingStyle.FORMAL: "Formal",
    GreetingStyle.CASUAL: "Casual",
    GreetingStyle.CREATIVE: "Creative",
}

MEMORY_ACTIONS = {"k": "keep", "a": "add", "r": "replace", "c": "clear"}

QUICK_COPY_STYLES = {
    "f": (GreetingStyle.FORMAL, 0),
    "c": (GreetingStyle.CASUAL, 0),
    "1": (GreetingStyle.CREATIVE, 0),
    "2": (GreetingStyle.CREATIVE, 1),
    "3": (GreetingStyle.CREATIVE, 2),
}


def show_error(error: Exception) -> None:
    console.print(f"[red]{error}[/]")


def _status(contact: Contact, state: AppState) -> str:
    if state.processing_id == contact.id:
        return "[yellow]generating...[/]"
    if contact.is_blessed:
        return "[magenta]blessed[/]"
    if contact.has_greetings:
        return "[green]ready[/]"
    return "[dim]pending[/]"


def render_contacts(contacts: List[Contact], state: AppState, title: str) -> None:
    """Show a numbered contact table."""
    table = Table(title=title, box=box.ROUNDED, show_header=True, header_style="bold")
    table.add_column("#", style="cyan", width=4)
    table.add_column("Name", style="white")
    table.add_column("Relationship", style="dim")
    table.add_column("Status")
    table.add_column("Greeting", style="dim", overflow="ellipsis", max_width=40)

    for i, contact in enumerate(contacts, 1):
        preview = contact.generated_greetings.formal if contact.generated_greetings else "-"
        table.add_row(
            str(i),
            f"[{contact.avatar_color or 'white'}]●[/] {contact.name}",
            contact.relationship,
            _status(contact, state),
            preview.replace("\n", " "),
        )

    console.print(table)


def _pick(contacts: List[Contact], label: str) -> Optional[Contact]:
    if not contacts:
        console.print("[dim]No contacts here.[/]")
        return None
    choice = Prompt.ask(f"{label} (number, blank to cancel)", default="")
    if not choice.strip():
        return None
    if not choice.isdigit() or not 1 <= int(choice) <= len(contacts):
        console.print("[red]No such contact.[/]")
        return None
    return contacts[int(choice) - 1]


async def run_batch_with_progress(controller: AppController) -> None:
    """Run "generate all" behind a progress bar."""
    # Started on the first batch update so the confirmation prompt is not
    # drawn underneath the live display
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("•"),
        TextColumn("[red]{task.fields[errors]}[/] err"),
        TextColumn("•"),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )
    task = progress.add_task("Generating", total=None, errors=0)

    def update(state: AppState) -> None:
        batch = state.batch
        if batch is None:
            return
        if not progress.live.is_started:
            progress.start()
        current = state.store.find(batch.processing_id)
        description = f"Generating for {current.name}" if current else "Generating"
        progress.update(
            task,
            description=description,
            completed=batch.progress.current,
            total=batch.progress.total,
            errors=len(batch.failures),
        )

    try:
        final = await controller.generate_all(on_progress=update)
    finally:
        progress.stop()

    if final is None:
        console.print("[dim]Skipped.[/]")
    elif final.failures:
        console.print(
            f"[yellow]{len(final.failures)} of {final.processed} contacts failed; "
            f"see the log for details.[/]"
        )


async def _quick_copy(controller: AppController, contacts: List[Contact]) -> None:
    """Copy one greeting straight from the dashboard."""
    contact = _pick(contacts, "Copy greeting of")
    if contact is None:
        return
    if not contact.has_greetings:
        console.print(f"[yellow]{contact.name} has no greetings yet, open it first.[/]")
        return
    key = Prompt.ask(
        "[cyan]f[/] formal, [cyan]c[/] casual, [cyan]1-3[/] creative",
        choices=list(QUICK_COPY_STYLES),
        default="f",
    )
    style, index = QUICK_COPY_STYLES[key]
    text = await controller.copy_greeting(contact.id, style, index)
    console.print(Panel(text, title=f"Copy this for {contact.name}", border_style="green"))
    console.print("[green]Copied! Moved to the blessed list.[/]")


async def dashboard_screen(controller: AppController, tab: str) -> Optional[str]:
    """
    Dashboard: pending and blessed lists plus global actions.

    Returns:
        The tab to show next, or None to quit
    """
    state = controller.state
    pending = state.store.unblessed()
    blessed = state.store.blessed()
    contacts = pending if tab == "pending" else blessed

    console.print()
    console.print(
        Panel.fit(
            f"[bold red]Spring Greetings[/]  "
            f"{len(pending)} pending · {len(blessed)} blessed · {len(state.store)} total",
            border_style="red",
        )
    )
    render_contacts(contacts, state, "Pending" if tab == "pending" else "Blessed")

    console.print("[dim]Commands:[/]")
    console.print("  [cyan]o[/] open   [cyan]y[/] copy   [cyan]a[/] add   [cyan]i[/] import   [cyan]d[/] delete")
    console.print("  [cyan]g[/] generate all   [cyan]t[/] switch tab   [cyan]q[/] quit")

    choice = Prompt.ask("Select", choices=["o", "y", "a", "i", "d", "g", "t", "q"], default="o")

    try:
        if choice == "q":
            return None
        if choice == "t":
            return "blessed" if tab == "pending" else "pending"
        if choice == "o":
            contact = _pick(contacts, "Open contact")
            if contact:
                controller.select_contact(contact.id)
        elif choice == "y":
            await _quick_copy(controller, contacts)
        elif choice == "a":
            name = Prompt.ask("Name", default="")
            if name.strip():
                await controller.add_contact(name)
        elif choice == "i":
            controller.open_import()
        elif choice == "d":
            contact = _pick(contacts, "Delete contact")
            if contact:
                await controller.delete_contact(contact.id)
        elif choice == "g":
            if not len(state.store):
                console.print("[dim]Add some contacts first.[/]")
            else:
                await run_batch_with_progress(controller)
    except GreetingsError as e:
        show_error(e)

    return tab


def _read_multiline(label: str) -> str:
    console.print(f"{label} [dim](finish with an empty line)[/]")
    lines = []
    while True:
        line = console.input()
        if not line.strip():
            break
        lines.append(line)
    return "\n".join(lines)


def _read_file(label: str) -> Optional[tuple]:
    raw = Prompt.ask(label, default="")
    if not raw.strip():
        return None
    path = Path(raw.strip()).expanduser()
    if not path.is_file():
        console.print(f"[red]File not found: {path}[/]")
        return None
    return path.read_bytes(), guess_mime_type(path)


async def import_screen(controller: AppController) -> None:
    """Import contacts from pasted text or a contact-list screenshot."""
    console.print()
    console.print(Panel.fit("[bold]Import contacts[/]", border_style="cyan"))
    choice = Prompt.ask(
        "[cyan]t[/] paste text, [cyan]s[/] screenshot, [cyan]c[/] cancel",
        choices=["t", "s", "c"],
        default="t",
    )

    try:
        if choice == "c":
            controller.cancel_import()
            return

        if choice == "t":
            text = _read_multiline("Names, one per line or comma separated")
            created = await controller.import_text(text)
        else:
            payload = _read_file("Screenshot path")
            if payload is None:
                return
            image_bytes, mime_type = payload
            with console.status("Reading names..."):
                created = await controller.import_image(image_bytes, mime_type)
            if not created:
                console.print("[yellow]No names recognized, try a clearer screenshot.[/]")
                return

        console.print(f"[green]Imported {len(created)} contacts.[/]")
    except GreetingsError as e:
        show_error(e)


async def memory_input_screen(controller: AppController) -> None:
    """Collect relationship and memories for the selected contact, then generate."""
    contact = controller.state.selected
    if contact is None:
        return

    console.print()
    console.print(
        Panel.fit(f"[bold]{contact.initial}[/]  {contact.name}", border_style="cyan")
    )

    presets = "  ".join(f"[cyan]{i}[/] {rel}" for i, rel in enumerate(PRESET_RELATIONSHIPS, 1))
    console.print(f"Presets: {presets}")
    relationship = Prompt.ask("Relationship (preset number or text, 'b' to go back)",
                              default=contact.relationship)
    if relationship == "b":
        controller.back()
        return
    if relationship.isdigit() and 1 <= int(relationship) <= len(PRESET_RELATIONSHIPS):
        relationship = PRESET_RELATIONSHIPS[int(relationship) - 1]

    memories = contact.memories or ""
    if memories:
        console.print(Panel(memories, title="Current memories", border_style="dim"))
        action = Prompt.ask(
            "[cyan]k[/] keep, [cyan]a[/] add, [cyan]r[/] replace, [cyan]c[/] clear",
            choices=list(MEMORY_ACTIONS),
            default="k",
        )
        action = MEMORY_ACTIONS[action]
    else:
        action = "add"

    typed = ""
    if action in ("add", "replace"):
        typed = _read_multiline("Memories (what happened this year?)")
    memories = revise_memories(memories, action, typed)

    try:
        if Confirm.ask("Add a voice memo?", default=False):
            payload = _read_file("Audio file path")
            if payload is not None:
                audio_bytes, mime_type = payload
                with console.status("Transcribing..."):
                    memories = await controller.transcribe(audio_bytes, mime_type, memories)
                console.print(f"[dim]Memories now:[/]\n{memories}")

        with console.status(f"Writing greetings for {contact.name}..."):
            await controller.generate(relationship, memories)
    except GenerationFailed as e:
        show_error(e)
        try:
            # Keep what was typed for the next attempt
            await controller.save_inputs(contact.id, relationship, memories)
            console.print("[dim]Your notes were saved.[/]")
        except GreetingsError as save_error:
            show_error(save_error)
    except GreetingsError as e:
        show_error(e)


def _show_greeting(contact: Contact, style: GreetingStyle, index: int) -> str:
    greetings = contact.generated_greetings
    text = greetings.text_for(style, index)
    title = STYLE_LABELS[style]
    if style is GreetingStyle.CREATIVE:
        variant = greetings.creative[index]
        tags = " ".join(f"#{tag}" for tag in variant.tags)
        title = f"{title} {index + 1}/3: {variant.title} {tags}".rstrip()
    console.print(Panel(text, title=title, border_style="red"))
    return text


async def preview_screen(controller: AppController, style: GreetingStyle, index: int) -> tuple:
    """
    Show one greeting of the selected contact with copy/edit actions.

    Returns:
        Tuple of (style, index) to show next
    """
    contact = controller.state.selected
    if contact is None or contact.generated_greetings is None:
        return style, index

    console.print()
    badge = " [magenta](blessed)[/]" if contact.is_blessed else ""
    console.print(f"[bold]{contact.name}[/] · {contact.relationship}{badge}")
    _show_greeting(contact, style, index)

    console.print("[dim]Commands:[/]")
    console.print("  [cyan]f[/] formal   [cyan]c[/] casual   [cyan]1-3[/] creative")
    console.print("  [cyan]y[/] copy   [cyan]e[/] edit   [cyan]r[/] rewrite   [cyan]b[/] back")
    choice = Prompt.ask(
        "Select", choices=["f", "c", "1", "2", "3", "y", "e", "r", "b"], default="y"
    )

    try:
        if choice == "f":
            return GreetingStyle.FORMAL, 0
        if choice == "c":
            return GreetingStyle.CASUAL, 0
        if choice in ("1", "2", "3"):
            return GreetingStyle.CREATIVE, int(choice) - 1
        if choice == "b":
            controller.back()
        elif choice == "y":
            text = await controller.copy_greeting(contact.id, style, index)
            console.print(Panel(text, title="Copy this", border_style="green"))
            console.print("[green]Copied! Moved to the blessed list.[/]")
        elif choice == "e":
            text = _read_multiline("New text")
            if text:
                await controller.save_greeting_text(contact.id, style, text, index)
                console.print("[green]Saved.[/]")
        elif choice == "r":
            with console.status(f"Rewriting greetings for {contact.name}..."):
                await controller.generate(contact.relationship, contact.memories or "")
            console.print("[green]Rewritten.[/]")
    except GreetingsError as e:
        show_error(e)

    return style, index
