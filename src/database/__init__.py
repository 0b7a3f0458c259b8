"""
File: database/__init__.py
Created: 2025-12-23
Last Modified: 2026-01-15
"""

from .common import DATA_DIR, LOCAL_DB_PATH
from .contacts import ContactDatabase
from .create_tables import init_local_database

__all__ = [
    "DATA_DIR",
    "LOCAL_DB_PATH",
    "ContactDatabase",
    "init_local_database",
]
