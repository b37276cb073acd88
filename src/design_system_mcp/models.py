"""Domain models for the design system corpus.

Record models (tokens, components, guidelines) are frozen pydantic models
that accept the camelCase keys used by the JSON data files as well as
snake_case field names. CacheSnapshot bundles one validated generation of
all three collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

TokenCategory = Literal["color", "typography", "spacing", "elevation", "motion"]

TOKEN_CATEGORIES: tuple[str, ...] = ("color", "typography", "spacing", "elevation", "motion")


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json_dict(self) -> dict[str, Any]:
        """Dump using the on-disk camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DesignToken(_Record):
    """A single named design value."""

    name: str = Field(min_length=1)
    value: str | int | float
    category: TokenCategory
    description: str | None = None
    usage: list[str] = Field(default_factory=list)
    deprecated: bool = False
    aliases: list[str] = Field(default_factory=list)


class ComponentProp(_Record):
    name: str
    type: str
    required: bool
    default: Any = None
    description: str


class ComponentVariant(_Record):
    name: str
    props: dict[str, Any] = Field(default_factory=dict)
    description: str


class ComponentExample(_Record):
    title: str
    description: str
    code: str
    language: str


class AccessibilityInfo(_Record):
    aria_labels: list[str] = Field(default_factory=list)
    keyboard_navigation: str | None = None
    screen_reader_support: str | None = None
    color_contrast: str | None = None


class Component(_Record):
    """A UI component with its props, variants and usage examples."""

    name: str = Field(min_length=1)
    description: str
    category: str
    props: list[ComponentProp]
    variants: list[ComponentVariant]
    examples: list[ComponentExample]
    guidelines: list[str]
    accessibility: AccessibilityInfo


class Guideline(_Record):
    """A written design guideline."""

    id: str = Field(min_length=1)
    title: str
    category: str
    content: str
    tags: list[str]
    last_updated: datetime
    related_components: list[str] = Field(default_factory=list)
    related_tokens: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class CacheSnapshot:
    """One immutable generation of the cached corpus.

    Replaced wholesale on every successful load; never mutated.
    """

    design_tokens: tuple[DesignToken, ...]
    components: tuple[Component, ...]
    guidelines: tuple[Guideline, ...]
    last_updated: datetime

    def counts(self) -> dict[str, int]:
        """Return record counts per collection."""
        return {
            "design_tokens": len(self.design_tokens),
            "components": len(self.components),
            "guidelines": len(self.guidelines),
        }


@dataclass
class DataLoadResult:
    """Result of a load attempt.

    Attributes:
        success: True if a new snapshot was published.
        data: The published snapshot (None on failure).
        errors: Collected per-record or per-file error messages.
    """

    success: bool
    data: CacheSnapshot | None = None
    errors: list[str] = field(default_factory=list)
