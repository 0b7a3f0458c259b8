"""
Contact persistence backed by the local SQLite database.

Every write goes through one connection and one commit, so a batch create or a
greeting update lands completely or not at all. Any sqlite error is re-raised
as PersistenceError; nothing is swallowed here.

File: database/contacts.py
Created: 2026-01-15
Last Modified: 2026-01-21
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import aiosqlite

from ..models import (
    Contact,
    ContactDraft,
    ContactNotFoundError,
    ContactUpdate,
    PersistenceError,
)
from .common import LOCAL_DB_PATH

log = logging.getLogger(__name__)

COLUMNS = (
    "id, name, relationship, memories, avatar_color, "
    "generated_greetings, is_blessed, created_at"
)


def _row_to_contact(row: Sequence[Any]) -> Contact:
    """Build a Contact from a row selected with COLUMNS."""
    (
        contact_id,
        name,
        relationship,
        memories,
        avatar_color,
        greetings_json,
        is_blessed,
        created_at,
    ) = row

    return Contact(
        id=contact_id,
        name=name,
        relationship=relationship,
        memories=memories,
        avatar_color=avatar_color,
        generated_greetings=json.loads(greetings_json) if greetings_json else None,
        is_blessed=bool(is_blessed),
        created_at=created_at,
    )


def _to_column(field: str, value: Any) -> Any:
    """Convert a ContactUpdate field value to its column representation."""
    if field == "generated_greetings":
        return value.model_dump_json() if value is not None else None
    if field == "is_blessed":
        return 1 if value else 0
    return value


class ContactDatabase:
    """
    Durable contact store keyed by contact id.

    Args:
        db_path: SQLite file (defaults to LOCAL_DB_PATH). The schema must exist,
            see init_local_database().
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or LOCAL_DB_PATH)

    def _new_row(self, draft: ContactDraft) -> tuple:
        return (
            uuid.uuid4().hex,
            draft.name,
            draft.relationship,
            None,
            draft.avatar_color,
            None,
            0,
            datetime.now().isoformat(),
        )

    async def _fetch(self, conn: aiosqlite.Connection, contact_id: str) -> Optional[Contact]:
        async with conn.execute(
            f"SELECT {COLUMNS} FROM contacts WHERE id = ?", (contact_id,)
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_contact(row) if row else None

    async def list(self) -> List[Contact]:
        """All contacts, oldest first."""
        contacts = []
        try:
            async with aiosqlite.connect(self.db_path) as conn:
                async with conn.execute(
                    f"SELECT {COLUMNS} FROM contacts ORDER BY created_at ASC, seq ASC"
                ) as cursor:
                    async for row in cursor:
                        contacts.append(_row_to_contact(row))
        # ValueError: a stored row that no longer decodes (bad JSON, invalid field)
        except (sqlite3.Error, ValueError) as e:
            raise PersistenceError(f"Failed to list contacts: {e}") from e

        log.info(f"Loaded {len(contacts)} contacts from {self.db_path}")
        return contacts

    async def create(self, draft: ContactDraft) -> Contact:
        """Insert one contact and return it with its new id."""
        created = await self.create_batch([draft])
        return created[0]

    async def create_batch(self, drafts: Sequence[ContactDraft]) -> List[Contact]:
        """
        Insert several contacts in a single transaction.

        Args:
            drafts: Contacts to create

        Returns:
            Created contacts, in the same order as ``drafts``
        """
        if not drafts:
            return []

        rows = [self._new_row(draft) for draft in drafts]
        try:
            async with aiosqlite.connect(self.db_path) as conn:
                await conn.executemany(
                    f"INSERT INTO contacts ({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                    rows,
                )
                await conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to create {len(rows)} contacts: {e}") from e

        log.info(f"Created {len(rows)} contacts")
        return [_row_to_contact(row) for row in rows]

    async def update(self, contact_id: str, changes: ContactUpdate) -> Contact:
        """
        Merge ``changes`` into the stored contact.

        Only fields set on ``changes`` are written. An empty update is a read.

        Raises:
            ContactNotFoundError: If no contact has ``contact_id``
            PersistenceError: On any database failure
        """
        values: Dict[str, Any] = {
            field: _to_column(field, value) for field, value in changes.changes().items()
        }

        try:
            async with aiosqlite.connect(self.db_path) as conn:
                if values:
                    assignments = ", ".join(f"{field} = ?" for field in sorted(values))
                    params = [values[field] for field in sorted(values)] + [contact_id]
                    cursor = await conn.execute(
                        f"UPDATE contacts SET {assignments} WHERE id = ?", params
                    )
                    if cursor.rowcount == 0:
                        raise ContactNotFoundError(contact_id)
                    await conn.commit()

                contact = await self._fetch(conn, contact_id)
        except (sqlite3.Error, ValueError) as e:
            raise PersistenceError(f"Failed to update contact {contact_id}: {e}") from e

        if contact is None:
            raise ContactNotFoundError(contact_id)
        return contact

    async def delete(self, contact_id: str) -> bool:
        """Delete a contact. Returns False when nothing was deleted."""
        try:
            async with aiosqlite.connect(self.db_path) as conn:
                cursor = await conn.execute("DELETE FROM contacts WHERE id = ?", (contact_id,))
                await conn.commit()
                deleted = cursor.rowcount > 0
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to delete contact {contact_id}: {e}") from e

        if deleted:
            log.info(f"Deleted contact {contact_id}")
        return deleted
