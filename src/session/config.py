"""
Runtime configuration for the greetings app.

Values come from the environment (a .env file is loaded by main.py).

File: session/config.py
Created: 2026-01-18
Last Modified: 2026-01-22
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler

from ..database import LOCAL_DB_PATH
from ..gemini.client import MODEL_NAME
from .batch import DEFAULT_DELAY

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"

# Noisy third-party loggers
QUIET_LOGGERS = ["google", "google.genai", "google.auth", "google_genai", "httpx", "httpcore"]


@dataclass
class AppConfig:
    """Configuration for one app session."""

    gemini_api_key: Optional[str] = None
    model: str = MODEL_NAME
    db_path: Path = field(default_factory=lambda: LOCAL_DB_PATH)
    batch_delay: float = DEFAULT_DELAY
    log_dir: Path = field(default_factory=lambda: Path("logs"))

    def __post_init__(self):
        # Ensure paths are Path objects
        if isinstance(self.db_path, str):
            self.db_path = Path(self.db_path)
        if isinstance(self.log_dir, str):
            self.log_dir = Path(self.log_dir)
        if self.batch_delay < 0:
            raise ValueError("batch_delay must not be negative")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Build the configuration from environment variables.

        Raises:
            ValueError: If GREETINGS_BATCH_DELAY is not a number
        """
        raw_delay = os.environ.get("GREETINGS_BATCH_DELAY")
        try:
            delay = float(raw_delay) if raw_delay else DEFAULT_DELAY
        except ValueError:
            raise ValueError(f"GREETINGS_BATCH_DELAY must be a number, got {raw_delay!r}")

        return cls(
            gemini_api_key=os.environ.get("GEMINI_API_KEY"),
            model=os.environ.get("GREETINGS_MODEL") or MODEL_NAME,
            db_path=Path(os.environ.get("GREETINGS_DB_PATH") or LOCAL_DB_PATH),
            batch_delay=delay,
            log_dir=Path(os.environ.get("GREETINGS_LOG_DIR") or "logs"),
        )


def configure_logging(log_dir: Path, console_level: int = logging.WARNING) -> None:
    """
    Log everything at INFO to a dated file and warnings to the console.

    Args:
        log_dir: Directory for log files (created if missing)
        console_level: Minimum level shown on the console
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(
        log_dir / f"greetings_{datetime.now().strftime('%Y-%m-%d')}.log", encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    console_handler = RichHandler(show_path=False, markup=False)
    console_handler.setLevel(console_level)

    logging.basicConfig(level=logging.INFO, handlers=[file_handler, console_handler], force=True)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)
