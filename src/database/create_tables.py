"""
File: database/create_tables.py
Created: 2025-12-23
Last Modified: 2026-01-15
"""

import logging
import sqlite3
from pathlib import Path
from typing import Optional

import aiosqlite

from ..models import PersistenceError
from .common import LOCAL_DB_PATH

log = logging.getLogger(__name__)


async def init_local_database(db_path: Optional[Path] = None) -> Path:
    """
    Initialize the local SQLite database with required tables.

    Args:
        db_path: Database file (defaults to LOCAL_DB_PATH)

    Returns:
        Path of the initialized database
    """
    db_path = Path(db_path or LOCAL_DB_PATH)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        async with aiosqlite.connect(db_path) as conn:
            # Contacts table; the greeting bundle is one JSON column so it is
            # always written whole
            await conn.execute("""
                CREATE TABLE IF NOT EXISTS contacts (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    relationship TEXT NOT NULL,
                    memories TEXT,
                    avatar_color TEXT,
                    generated_greetings TEXT,  -- JSON object
                    is_blessed INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    UNIQUE(id)
                )
            """)

            await conn.execute("CREATE INDEX IF NOT EXISTS idx_contacts_created ON contacts(created_at)")

            await conn.commit()
    except sqlite3.Error as e:
        raise PersistenceError(f"Failed to initialize database at {db_path}: {e}") from e

    log.info(f"Local database initialized at {db_path}")
    return db_path
