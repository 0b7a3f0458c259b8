"""
Common database constants and utilities

File: database/common.py
Created: 2025-12-23
Last Modified: 2026-01-15
"""

from pathlib import Path

DATA_DIR = Path(__file__).parent.parent.parent / "data"
LOCAL_DB_PATH = DATA_DIR / "greetings.db"

__all__ = [
    "DATA_DIR",
    "LOCAL_DB_PATH",
]
