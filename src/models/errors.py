"""
Exception hierarchy shared across the app.

Validation errors are raised before any network or database call. Capability
errors (Gemini, SQLite) propagate to the caller, which decides whether to
alert the user or record-and-continue.

File: models/errors.py
Created: 2026-01-14
Last Modified: 2026-01-20
"""

from typing import Optional


class GreetingsError(Exception):
    """Base class for all application errors."""


class InputValidationError(GreetingsError):
    """User input rejected before any side effect."""


class GeminiError(GreetingsError):
    """The Gemini call failed as a unit (transport, refusal, malformed output)."""


class PersistenceError(GreetingsError):
    """A read or write against the contacts database failed."""


class ContactNotFoundError(PersistenceError):
    """No stored contact has the requested id."""

    def __init__(self, contact_id: str):
        super().__init__(f"Contact not found: {contact_id}")
        self.contact_id = contact_id


class GenerationFailed(GreetingsError):
    """A single-contact generation produced no greeting."""

    def __init__(self, contact_id: str, cause: Optional[BaseException] = None):
        message = f"Generation failed for contact {contact_id}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)
        self.contact_id = contact_id
        self.cause = cause


class GenerationInProgress(GreetingsError):
    """Another generation (single or batch) is already running."""


class ConfigurationError(GreetingsError):
    """The app cannot start with the current settings (e.g. no API key)."""
