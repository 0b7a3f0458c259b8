"""
Application controller.

Owns the single AppState value and is the only place it is replaced. Every
operation that writes goes to the database first and only then updates the
in-memory state, so a failed write leaves the state exactly as it was.

Interactive operations raise GreetingsError subclasses for the UI to show.
Batch generation records per-contact failures and keeps going.

File: session/controller.py
Created: 2026-01-18
Last Modified: 2026-01-22
"""

import logging
from typing import Callable, List, Optional

from ..models import (
    Contact,
    ContactDraft,
    ContactUpdate,
    GenerationInProgress,
    GreetingStyle,
    InputValidationError,
)
from .batch import DEFAULT_DELAY, BatchPlan, BatchState, plan_batch, run_batch
from .generation import generate_for_contact
from .importing import parse_names_text, read_names_from_image, transcribe_memo
from .navigation import (
    Back,
    CancelImport,
    ContactAdded,
    ContactDeleted,
    GenerationSucceeded,
    ImportFinished,
    OpenImport,
    SelectContact,
)
from .ports import ContactGateway, GreetingGenerator, NameReader, Transcriber
from .state import AppState
from .store import ContactStore

log = logging.getLogger(__name__)

BATCH_COMPLETE_MESSAGE = "🎉 Batch generation complete!"


class AppController:
    """
    Drives the app: contacts, navigation and greeting generation.

    Args:
        gateway: Contact persistence
        generator: Greeting generation (Gemini)
        confirm: Asks the user a yes/no question; used before destructive actions
        notify: Shows a message to the user
        reader: Screenshot name recognition (defaults to ``generator`` if it has one)
        transcriber: Voice memo transcription (defaults to ``generator`` if it has one)
        batch_delay: Pause between batch items, in seconds
        on_change: Called with every new AppState
    """

    def __init__(
        self,
        gateway: ContactGateway,
        generator: GreetingGenerator,
        confirm: Callable[[str], bool],
        notify: Callable[[str], None],
        reader: Optional[NameReader] = None,
        transcriber: Optional[Transcriber] = None,
        batch_delay: float = DEFAULT_DELAY,
        on_change: Optional[Callable[[AppState], None]] = None,
    ):
        self.gateway = gateway
        self.generator = generator
        self.reader = reader or generator
        self.transcriber = transcriber or generator
        self.batch_delay = batch_delay
        self._confirm = confirm
        self._notify = notify
        self._on_change = on_change
        self._state = AppState()

    @property
    def state(self) -> AppState:
        return self._state

    def _set(self, state: AppState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    def _ensure_idle(self) -> None:
        if self._state.is_busy:
            raise GenerationInProgress("A generation is already running")

    # Loading

    async def load(self) -> List[Contact]:
        """Replace the in-memory contacts with what the database holds."""
        contacts = await self.gateway.list()
        self._set(self._state.with_store(ContactStore.of(contacts)))
        return contacts

    # Contacts

    async def add_contact(self, name: str) -> Contact:
        """
        Create a contact and open its memory input screen.

        Raises:
            InputValidationError: If the name is blank
        """
        name = (name or "").strip()
        if not name:
            raise InputValidationError("Name must not be empty")

        contact = await self.gateway.create(ContactDraft(name=name))
        state = self._state.with_store(self._state.store.add(contact))
        self._set(state.navigate(ContactAdded(contact.id)))
        return contact

    def select_contact(self, contact_id: str) -> None:
        self._set(self._state.navigate(SelectContact(contact_id)))

    def back(self) -> None:
        self._set(self._state.navigate(Back()))

    async def delete_contact(self, contact_id: str) -> bool:
        """
        Delete a contact after confirmation.

        Returns:
            False if the user declined, True once deleted
        """
        contact = self._state.store.find(contact_id)
        if contact is None:
            return False
        if not self._confirm(f"Delete {contact.name}?"):
            return False

        await self.gateway.delete(contact_id)
        state = self._state.navigate(ContactDeleted(contact_id))
        self._set(state.with_store(state.store.remove(contact_id)))
        return True

    async def mark_blessed(self, contact_id: str) -> Contact:
        """
        Flag a contact as blessed. Already-blessed contacts are not rewritten.
        """
        contact = self._state.store.find(contact_id)
        if contact is None:
            raise InputValidationError(f"Unknown contact: {contact_id}")
        if contact.is_blessed:
            return contact

        saved = await self.gateway.update(contact_id, ContactUpdate(is_blessed=True))
        self._set(self._state.with_contact(saved))
        return saved

    async def copy_greeting(
        self, contact_id: str, style: GreetingStyle, index: int = 0
    ) -> str:
        """
        Return the text of one greeting for the clipboard and mark the
        contact blessed.
        """
        contact = self._state.store.find(contact_id)
        if contact is None or contact.generated_greetings is None:
            raise InputValidationError("There is no greeting to copy yet")

        text = contact.generated_greetings.text_for(style, index)
        await self.mark_blessed(contact_id)
        return text

    async def save_greeting_text(
        self, contact_id: str, style: GreetingStyle, text: str, index: int = 0
    ) -> Contact:
        """Persist an edited greeting; the whole bundle is rewritten."""
        contact = self._state.store.find(contact_id)
        if contact is None or contact.generated_greetings is None:
            raise InputValidationError("There is no greeting to edit yet")
        if not text or not text.strip():
            raise InputValidationError("Greeting text must not be empty")

        greetings = contact.generated_greetings.with_text(style, text, index)
        saved = await self.gateway.update(
            contact_id, ContactUpdate(generated_greetings=greetings)
        )
        self._set(self._state.with_contact(saved))
        return saved

    async def save_inputs(
        self, contact_id: str, relationship: Optional[str], memories: Optional[str]
    ) -> Contact:
        """
        Persist relationship and memories without generating, so notes typed
        for a failed generation are not lost. A blank relationship keeps the
        stored one; blank memories clear them.
        """
        contact = self._state.store.find(contact_id)
        if contact is None:
            raise InputValidationError(f"Unknown contact: {contact_id}")

        if not relationship or not relationship.strip():
            relationship = contact.relationship
        memories = memories.strip() if memories else None

        saved = await self.gateway.update(
            contact_id, ContactUpdate(relationship=relationship, memories=memories or None)
        )
        self._set(self._state.with_contact(saved))
        return saved

    # Import

    def open_import(self) -> None:
        self._set(self._state.navigate(OpenImport()))

    def cancel_import(self) -> None:
        self._set(self._state.navigate(CancelImport()))

    async def import_names(self, names: List[str]) -> List[Contact]:
        """Create one contact per name in a single batch and return to the dashboard."""
        drafts = [ContactDraft(name=name) for name in names if name and name.strip()]
        if not drafts:
            raise InputValidationError("Enter at least one name")

        created = await self.gateway.create_batch(drafts)
        state = self._state.with_store(self._state.store.add_many(created))
        self._set(state.navigate(ImportFinished()))
        log.info(f"Imported {len(created)} contacts")
        return created

    async def import_text(self, text: str) -> List[Contact]:
        return await self.import_names(parse_names_text(text))

    async def import_image(self, image_bytes: bytes, mime_type: Optional[str]) -> List[Contact]:
        """
        Import names recognized in a screenshot.

        Returns:
            Created contacts; empty when nothing was recognized (the view
            stays on the import screen)
        """
        names = await read_names_from_image(image_bytes, mime_type, self.reader)
        if not names:
            return []
        return await self.import_names(names)

    async def transcribe(
        self, audio_bytes: bytes, mime_type: Optional[str], memories: Optional[str]
    ) -> str:
        """Append a voice memo transcript to ``memories`` and return the result."""
        return await transcribe_memo(audio_bytes, mime_type, memories, self.transcriber)

    # Generation

    async def generate(self, relationship: str, memories: str) -> Contact:
        """
        Generate greetings for the selected contact and open the preview.

        Raises:
            InputValidationError: If no contact is selected or relationship is blank
            GenerationInProgress: If another generation is running
            GenerationFailed: If generation or saving failed; nothing changed
        """
        contact = self._state.selected
        if contact is None:
            raise InputValidationError("No contact selected")
        if not relationship or not relationship.strip():
            raise InputValidationError("Please fill in your relationship")
        self._ensure_idle()

        self._set(self._state.with_generating(True))
        try:
            result = await generate_for_contact(
                self._state.store,
                contact.id,
                relationship,
                memories,
                self.generator,
                self.gateway,
            )
        finally:
            self._set(self._state.with_generating(False))

        state = self._state.with_store(result.store)
        self._set(state.navigate(GenerationSucceeded(contact.id)))
        return result.contact

    def plan_generate_all(self) -> BatchPlan:
        return plan_batch(self._state.store)

    async def generate_all(
        self, on_progress: Optional[Callable[[AppState], None]] = None
    ) -> Optional[BatchState]:
        """
        Generate greetings for every pending contact, or for everyone when
        none is pending, after confirmation.

        Args:
            on_progress: Called with the app state after every batch step

        Returns:
            Final batch state, or None if there was nothing to do or the user
            declined
        """
        self._ensure_idle()
        plan = self.plan_generate_all()
        if plan.is_empty:
            return None
        if not self._confirm(plan.confirmation_message):
            return None

        async def attempt(contact_id: str) -> None:
            contact = self._state.store.find(contact_id)
            relationship = contact.relationship if contact is not None else None
            memories = contact.memories if contact is not None else None
            result = await generate_for_contact(
                self._state.store,
                contact_id,
                relationship,
                memories,
                self.generator,
                self.gateway,
            )
            self._set(self._state.with_store(result.store))

        def observe(batch: BatchState) -> None:
            self._set(self._state.with_batch(batch))
            if on_progress is not None:
                on_progress(self._state)

        final, announce = await run_batch(
            plan, attempt, delay=self.batch_delay, on_change=observe
        )
        if announce:
            self._notify(BATCH_COMPLETE_MESSAGE)
        return final

