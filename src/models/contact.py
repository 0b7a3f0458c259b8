"""
Contact models.

``Contact`` is the stored record, ``ContactDraft`` is what creation accepts
(manual entry and batch import share it), ``ContactUpdate`` carries a partial
update where only the fields that were set are written.

File: models/contact.py
Created: 2025-12-23
Last Modified: 2026-01-18
"""

import random
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .greetings import GeneratedGreetings

DEFAULT_RELATIONSHIP = "朋友"
DEFAULT_MEMORIES = "感谢过去一年的陪伴与支持，祝新年快乐"

# Cosmetic only, never read by the generation core
AVATAR_COLORS: List[str] = ["red", "orange", "yellow", "pink", "purple"]

PRESET_RELATIONSHIPS: List[str] = ["同事", "导师", "朋友", "领导", "亲戚"]


def random_avatar_color() -> str:
    """Pick an avatar colour uniformly from the palette."""
    return random.choice(AVATAR_COLORS)


def normalize_inputs(
    relationship: Optional[str], memories: Optional[str]
) -> Tuple[str, str]:
    """
    Substitute the documented defaults for blank generation inputs.

    Args:
        relationship: Relationship label as typed (may be None or whitespace)
        memories: Memory notes as typed (may be None or whitespace)

    Returns:
        Tuple of (relationship, memories), never blank
    """
    rel = relationship if relationship and relationship.strip() else DEFAULT_RELATIONSHIP
    mem = memories if memories and memories.strip() else DEFAULT_MEMORIES
    return rel, mem


def _require_name(value: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValueError("name must not be empty")
    return value


class Contact(BaseModel):
    """A person to send a greeting to."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., description="Opaque id assigned by the database", min_length=1)
    name: str = Field(..., description="Display name")
    relationship: str = Field(DEFAULT_RELATIONSHIP, description="Relationship label")
    memories: Optional[str] = Field(None, description="Free-text memory notes")
    avatar_color: Optional[str] = Field(None, description="Cosmetic avatar colour")
    generated_greetings: Optional[GeneratedGreetings] = Field(
        None, description="Present once generation has completed"
    )
    is_blessed: bool = Field(False, description="True once a greeting was copied")
    created_at: Optional[str] = Field(None, description="ISO creation timestamp")

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _require_name(value)

    @field_validator("relationship", mode="before")
    @classmethod
    def _default_relationship(cls, value: Optional[str]) -> str:
        if value is None or not str(value).strip():
            return DEFAULT_RELATIONSHIP
        return value

    @property
    def has_greetings(self) -> bool:
        return self.generated_greetings is not None

    @property
    def initial(self) -> str:
        return self.name[:1].upper()

    def to_wire(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys used on the wire."""
        return self.model_dump(by_alias=True, mode="json")


class ContactDraft(BaseModel):
    """Input for creating a contact."""

    name: str = Field(..., description="Display name")
    relationship: str = Field(DEFAULT_RELATIONSHIP, description="Relationship label")
    avatar_color: str = Field(default_factory=random_avatar_color)

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        return _require_name(value)

    @field_validator("relationship", mode="before")
    @classmethod
    def _default_relationship(cls, value: Optional[str]) -> str:
        if value is None or not str(value).strip():
            return DEFAULT_RELATIONSHIP
        return value


class ContactUpdate(BaseModel):
    """Partial update; unset fields are left untouched in storage."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    relationship: Optional[str] = None
    memories: Optional[str] = None
    avatar_color: Optional[str] = None
    generated_greetings: Optional[GeneratedGreetings] = None
    is_blessed: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        """Only the fields explicitly supplied by the caller."""
        return {name: getattr(self, name) for name in self.model_fields_set}

    def is_empty(self) -> bool:
        return not self.model_fields_set
