"""
Capabilities the orchestration core depends on.

GeminiClient and ContactDatabase satisfy these; tests substitute in-memory
fakes.

File: session/ports.py
Created: 2026-01-16
"""

from typing import List, Protocol, Sequence

from ..models import Contact, ContactDraft, ContactUpdate, GeneratedGreetings


class GreetingGenerator(Protocol):
    async def generate_greetings(
        self, name: str, relationship: str, memories: str
    ) -> GeneratedGreetings:
        """Return a complete bundle or raise."""
        ...


class NameReader(Protocol):
    async def parse_contacts_image(self, image_bytes: bytes, mime_type: str) -> List[str]:
        """Names visible in a contact-list screenshot; [] when none."""
        ...


class Transcriber(Protocol):
    async def transcribe_audio(self, audio_bytes: bytes, mime_type: str) -> str:
        """Transcript of a voice memo, possibly empty."""
        ...


class ContactGateway(Protocol):
    async def list(self) -> List[Contact]:
        """All contacts, oldest first."""
        ...

    async def create(self, draft: ContactDraft) -> Contact:
        ...

    async def create_batch(self, drafts: Sequence[ContactDraft]) -> List[Contact]:
        """Created contacts in input order; all or nothing."""
        ...

    async def update(self, contact_id: str, changes: ContactUpdate) -> Contact:
        """Merge the supplied fields and return the stored record."""
        ...

    async def delete(self, contact_id: str) -> bool:
        ...
