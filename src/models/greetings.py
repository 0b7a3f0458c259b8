"""
Greeting bundle models.

A bundle is only ever built from one complete generation response, so it is
validated as a whole: two texts plus exactly three creative variants.

File: models/greetings.py
Created: 2026-01-14
Last Modified: 2026-01-18
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

CREATIVE_VARIANT_COUNT = 3


class GreetingStyle(str, Enum):
    """Tabs shown in the preview screen."""

    FORMAL = "formal"
    CASUAL = "casual"
    CREATIVE = "creative"


class CreativeVariant(BaseModel):
    """One creative option (short poem, pun, name acrostic...)."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Variant identifier, unique within a bundle")
    title: str = Field(..., description="Short title shown above the content")
    content: str = Field(..., description="The greeting text")
    tags: List[str] = Field(default_factory=list, description="Labels, no duplicates")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        # Models sometimes answer with numeric ids
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, tags: List[str]) -> List[str]:
        seen = []
        for tag in tags:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


class GeneratedGreetings(BaseModel):
    """Atomic greeting bundle: formal + casual + three creative variants."""

    model_config = ConfigDict(frozen=True)

    formal: str = Field(..., min_length=1, description="Formal written greeting")
    casual: str = Field(..., min_length=1, description="Casual chat greeting")
    creative: List[CreativeVariant] = Field(
        ...,
        min_length=CREATIVE_VARIANT_COUNT,
        max_length=CREATIVE_VARIANT_COUNT,
        description="Exactly three creative variants",
    )

    def text_for(self, style: GreetingStyle, index: int = 0) -> str:
        """Text of one tab; ``index`` picks the creative variant."""
        style = GreetingStyle(style)
        if style is GreetingStyle.FORMAL:
            return self.formal
        if style is GreetingStyle.CASUAL:
            return self.casual
        if not 0 <= index < len(self.creative):
            raise IndexError(f"Creative variant {index} out of range")
        return self.creative[index].content

    def with_text(self, style: GreetingStyle, text: str, index: int = 0) -> "GeneratedGreetings":
        """Return a copy of the bundle with one text replaced (preview edits)."""
        style = GreetingStyle(style)
        if style is GreetingStyle.FORMAL:
            return self.model_copy(update={"formal": text})
        if style is GreetingStyle.CASUAL:
            return self.model_copy(update={"casual": text})
        if not 0 <= index < len(self.creative):
            raise IndexError(f"Creative variant {index} out of range")
        creative = list(self.creative)
        creative[index] = creative[index].model_copy(update={"content": text})
        return self.model_copy(update={"creative": creative})
