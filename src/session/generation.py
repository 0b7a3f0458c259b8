"""
Single-contact generation flow.

Takes one contact from "has relationship + memories" to "has a persisted
greeting bundle": normalize inputs, call the generator, write relationship,
memories and bundle in one update, then swap the stored record into the
contact store. The store is only touched after the database write succeeded.

File: session/generation.py
Created: 2026-01-16
Last Modified: 2026-01-21
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..models import (
    Contact,
    ContactUpdate,
    GenerationFailed,
    normalize_inputs,
)
from .ports import ContactGateway, GreetingGenerator
from .store import ContactStore

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    store: ContactStore
    contact: Contact


async def generate_for_contact(
    store: ContactStore,
    contact_id: str,
    relationship: Optional[str],
    memories: Optional[str],
    generator: GreetingGenerator,
    gateway: ContactGateway,
) -> GenerationResult:
    """
    Generate, persist and apply a greeting bundle for one contact.

    Args:
        store: Current contact store
        contact_id: Contact to generate for
        relationship: Relationship label (blank means the default)
        memories: Memory notes (blank means the default)
        generator: Greeting generation capability
        gateway: Contact persistence

    Returns:
        GenerationResult with the new store and the persisted contact

    Raises:
        GenerationFailed: If the contact is unknown, the generator fails or the
            database write fails. ``store`` is left as it was.
    """
    contact = store.find(contact_id)
    if contact is None:
        raise GenerationFailed(contact_id, LookupError("contact is not in the store"))

    rel, mem = normalize_inputs(relationship, memories)

    try:
        greetings = await generator.generate_greetings(contact.name, rel, mem)
    except Exception as e:
        raise GenerationFailed(contact_id, e) from e

    try:
        saved = await gateway.update(
            contact_id,
            ContactUpdate(relationship=rel, memories=mem, generated_greetings=greetings),
        )
    except Exception as e:
        raise GenerationFailed(contact_id, e) from e

    log.info(f"Generated greetings for {contact.name} ({contact_id})")
    return GenerationResult(store=store.replace(contact_id, saved), contact=saved)
