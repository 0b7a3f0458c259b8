"""
In-memory contact collection for the running session.

Every operation returns a new ContactStore; nothing is mutated in place, so a
reference to a store is always a consistent snapshot.

File: session/store.py
Created: 2026-01-16
Last Modified: 2026-01-20
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from ..models import Contact


@dataclass(frozen=True)
class ContactStore:
    """Ordered, immutable collection of contacts keyed by id."""

    contacts: Tuple[Contact, ...] = ()

    @classmethod
    def of(cls, contacts: Iterable[Contact]) -> "ContactStore":
        return cls(tuple(contacts))

    def add(self, contact: Contact) -> "ContactStore":
        return ContactStore(self.contacts + (contact,))

    def add_many(self, contacts: Iterable[Contact]) -> "ContactStore":
        return ContactStore(self.contacts + tuple(contacts))

    def replace(self, contact_id: str, updated: Contact) -> "ContactStore":
        """Swap the record for ``contact_id``; no-op if the id is absent."""
        if self.find(contact_id) is None:
            return self
        return ContactStore(
            tuple(updated if c.id == contact_id else c for c in self.contacts)
        )

    def remove(self, contact_id: str) -> "ContactStore":
        return ContactStore(tuple(c for c in self.contacts if c.id != contact_id))

    def find(self, contact_id: Optional[str]) -> Optional[Contact]:
        if contact_id is None:
            return None
        for contact in self.contacts:
            if contact.id == contact_id:
                return contact
        return None

    # Read views

    def pending(self) -> List[Contact]:
        """Contacts without a greeting bundle, in store order."""
        return [c for c in self.contacts if not c.has_greetings]

    def unblessed(self) -> List[Contact]:
        return [c for c in self.contacts if not c.is_blessed]

    def blessed(self) -> List[Contact]:
        return [c for c in self.contacts if c.is_blessed]

    def ids(self) -> List[str]:
        return [c.id for c in self.contacts]

    def __len__(self) -> int:
        return len(self.contacts)

    def __iter__(self) -> Iterator[Contact]:
        return iter(self.contacts)

    def __contains__(self, contact_id: object) -> bool:
        return any(c.id == contact_id for c in self.contacts)
