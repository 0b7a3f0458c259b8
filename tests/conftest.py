"""
Shared fixtures: in-memory stand-ins for the Gemini client and the contact
database, plus builders for contacts and greeting bundles.
"""

import itertools
from typing import Dict, List, Optional, Sequence

import pytest

from src.models import (
    Contact,
    ContactDraft,
    ContactNotFoundError,
    ContactUpdate,
    CreativeVariant,
    GeminiError,
    GeneratedGreetings,
    PersistenceError,
)


def make_greetings(tag: str = "x") -> GeneratedGreetings:
    return GeneratedGreetings(
        formal=f"formal {tag}",
        casual=f"casual {tag}",
        creative=[
            CreativeVariant(id=str(i), title=f"title {i}", content=f"creative {i} {tag}", tags=["马年"])
            for i in range(1, 4)
        ],
    )


def make_contact(
    name: str,
    contact_id: Optional[str] = None,
    greetings: Optional[GeneratedGreetings] = None,
    is_blessed: bool = False,
    relationship: str = "朋友",
    memories: Optional[str] = None,
) -> Contact:
    return Contact(
        id=contact_id or f"id-{name}",
        name=name,
        relationship=relationship,
        memories=memories,
        avatar_color="red",
        generated_greetings=greetings,
        is_blessed=is_blessed,
        created_at="2026-01-01T00:00:00",
    )


class FakeGenerator:
    """Records calls; fails for names listed in ``fail_names``."""

    def __init__(self, fail_names: Sequence[str] = (), names: Sequence[str] = (), transcript: str = ""):
        self.fail_names = set(fail_names)
        self.names = list(names)
        self.transcript = transcript
        self.calls: List[tuple] = []
        self.image_calls: List[tuple] = []
        self.audio_calls: List[tuple] = []

    async def generate_greetings(self, name: str, relationship: str, memories: str) -> GeneratedGreetings:
        self.calls.append((name, relationship, memories))
        if name in self.fail_names:
            raise GeminiError(f"no greeting for {name}")
        return make_greetings(name)

    async def parse_contacts_image(self, image_bytes: bytes, mime_type: str) -> List[str]:
        self.image_calls.append((image_bytes, mime_type))
        return list(self.names)

    async def transcribe_audio(self, audio_bytes: bytes, mime_type: str) -> str:
        self.audio_calls.append((audio_bytes, mime_type))
        return self.transcript


class FakeGateway:
    """Dict-backed contact persistence with switchable failures."""

    def __init__(self, contacts: Sequence[Contact] = ()):
        self.contacts: Dict[str, Contact] = {c.id: c for c in contacts}
        self.fail_update = False
        self.fail_create = False
        self.update_calls: List[tuple] = []
        self.deleted: List[str] = []
        self._ids = itertools.count(1)

    async def list(self) -> List[Contact]:
        return list(self.contacts.values())

    async def create(self, draft: ContactDraft) -> Contact:
        created = await self.create_batch([draft])
        return created[0]

    async def create_batch(self, drafts: Sequence[ContactDraft]) -> List[Contact]:
        if self.fail_create:
            raise PersistenceError("disk full")
        created = []
        for draft in drafts:
            contact = Contact(
                id=f"new-{next(self._ids)}",
                name=draft.name,
                relationship=draft.relationship,
                avatar_color=draft.avatar_color,
            )
            self.contacts[contact.id] = contact
            created.append(contact)
        return created

    async def update(self, contact_id: str, changes: ContactUpdate) -> Contact:
        self.update_calls.append((contact_id, changes))
        if self.fail_update:
            raise PersistenceError("database is locked")
        if contact_id not in self.contacts:
            raise ContactNotFoundError(contact_id)
        updated = self.contacts[contact_id].model_copy(update=changes.changes())
        self.contacts[contact_id] = updated
        return updated

    async def delete(self, contact_id: str) -> bool:
        self.deleted.append(contact_id)
        return self.contacts.pop(contact_id, None) is not None


@pytest.fixture
def generator():
    return FakeGenerator()


@pytest.fixture
def gateway():
    return FakeGateway()
