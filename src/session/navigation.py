"""
View navigation as an explicit state machine.

The navigation state is a view tag plus the selected contact id. Events are
small frozen dataclasses; ``transition`` is total: any (state, event) pair it
has no rule for leaves the state unchanged.

File: session/navigation.py
Created: 2026-01-16
Last Modified: 2026-01-20
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union

from .store import ContactStore


class View(str, Enum):
    DASHBOARD = "DASHBOARD"
    IMPORT = "IMPORT"
    MEMORY_INPUT = "MEMORY_INPUT"
    PREVIEW = "PREVIEW"


# Views that render the selected contact
CONTACT_VIEWS = (View.MEMORY_INPUT, View.PREVIEW)


@dataclass(frozen=True)
class Navigation:
    view: View = View.DASHBOARD
    selected_id: Optional[str] = None


@dataclass(frozen=True)
class OpenImport:
    pass


@dataclass(frozen=True)
class ImportFinished:
    pass


@dataclass(frozen=True)
class CancelImport:
    pass


@dataclass(frozen=True)
class ContactAdded:
    contact_id: str


@dataclass(frozen=True)
class SelectContact:
    contact_id: str


@dataclass(frozen=True)
class GenerationSucceeded:
    contact_id: str


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class ContactDeleted:
    contact_id: str


NavEvent = Union[
    OpenImport,
    ImportFinished,
    CancelImport,
    ContactAdded,
    SelectContact,
    GenerationSucceeded,
    Back,
    ContactDeleted,
]

DASHBOARD = Navigation()


def _has_greetings(store: ContactStore, contact_id: Optional[str]) -> bool:
    contact = store.find(contact_id)
    return contact is not None and contact.has_greetings


def transition(nav: Navigation, event: NavEvent, store: ContactStore) -> Navigation:
    """
    Compute the next navigation state.

    Args:
        nav: Current state
        event: What happened
        store: Contacts, used to check whether the selection has a bundle

    Returns:
        The next state (``nav`` itself when the event does not apply)
    """
    view = nav.view

    if isinstance(event, OpenImport):
        if view is View.DASHBOARD:
            return replace(nav, view=View.IMPORT)
        return nav

    if isinstance(event, (ImportFinished, CancelImport)):
        if view is View.IMPORT:
            return replace(nav, view=View.DASHBOARD)
        return nav

    if isinstance(event, ContactAdded):
        # New contacts never have a bundle yet
        if view is View.DASHBOARD:
            return Navigation(View.MEMORY_INPUT, event.contact_id)
        return nav

    if isinstance(event, SelectContact):
        if view is not View.DASHBOARD or event.contact_id not in store:
            return nav
        target = View.PREVIEW if _has_greetings(store, event.contact_id) else View.MEMORY_INPUT
        return Navigation(target, event.contact_id)

    if isinstance(event, GenerationSucceeded):
        if view is View.MEMORY_INPUT and nav.selected_id == event.contact_id:
            return replace(nav, view=View.PREVIEW)
        return nav

    if isinstance(event, Back):
        if view is View.PREVIEW and not _has_greetings(store, nav.selected_id):
            return replace(nav, view=View.MEMORY_INPUT)
        if view is View.DASHBOARD:
            return nav
        # Selection is kept so the dashboard can highlight the last contact
        return replace(nav, view=View.DASHBOARD)

    if isinstance(event, ContactDeleted):
        if nav.selected_id == event.contact_id:
            return DASHBOARD
        return nav

    raise TypeError(f"Unknown navigation event: {event!r}")


def resolve(nav: Navigation, store: ContactStore) -> Navigation:
    """
    Degrade a contact view whose selection no longer resolves to the dashboard.
    """
    if nav.view in CONTACT_VIEWS and store.find(nav.selected_id) is None:
        return DASHBOARD
    return nav
