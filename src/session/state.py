"""
Application state.

One frozen value holds everything the UI renders: contacts, navigation,
whether a single generation is running and the current batch. Transitions are
pure and return a new AppState.

File: session/state.py
Created: 2026-01-18
Last Modified: 2026-01-21
"""

from dataclasses import dataclass, replace
from typing import Optional

from ..models import Contact
from .batch import BatchState, Progress
from .navigation import Navigation, NavEvent, resolve, transition
from .store import ContactStore


@dataclass(frozen=True)
class AppState:
    store: ContactStore = ContactStore()
    nav: Navigation = Navigation()
    generating: bool = False
    batch: Optional[BatchState] = None

    @property
    def is_busy(self) -> bool:
        """True while any generation (single or batch) is running."""
        return self.generating or (self.batch is not None and self.batch.running)

    @property
    def processing_id(self) -> Optional[str]:
        return self.batch.processing_id if self.batch is not None else None

    @property
    def progress(self) -> Progress:
        return self.batch.progress if self.batch is not None else Progress()

    @property
    def selected(self) -> Optional[Contact]:
        """The selected contact, if it still exists."""
        return self.store.find(self.nav.selected_id)

    def with_store(self, store: ContactStore) -> "AppState":
        # Navigation may point at a contact that just disappeared
        return replace(self, store=store, nav=resolve(self.nav, store))

    def navigate(self, event: NavEvent) -> "AppState":
        return replace(self, nav=transition(self.nav, event, self.store))

    def with_contact(self, contact: Contact) -> "AppState":
        return self.with_store(self.store.replace(contact.id, contact))

    def with_generating(self, generating: bool) -> "AppState":
        return replace(self, generating=generating)

    def with_batch(self, batch: Optional[BatchState]) -> "AppState":
        return replace(self, batch=batch)
