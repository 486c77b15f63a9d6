"""Pydantic models for UI elements and the parsed vision-model analysis.

Python attributes are snake_case; JSON uses the camelCase names the model
is prompted with (``fontFamily``, ``backgroundColor``, ...).
"""

from __future__ import annotations

from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Numeric sub-keys fall back to the raw string when they can't be coerced
Number = int | float | str


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Geometry(_CamelModel):
    """Element bounding box in screenshot pixel space."""

    x: Number | None = None
    y: Number | None = None
    width: Number | None = None
    height: Number | None = None


class Typography(_CamelModel):
    """Per-element text styling. Absent fields were not determinable."""

    font_family: str | None = None
    font_size: Number | None = None
    font_weight: str | None = None
    color: str | None = None


class Appearance(_CamelModel):
    """Per-element box styling."""

    background_color: str | None = None
    border_color: str | None = None
    border_width: Number | None = None
    border_radius: Number | None = None


class UIElement(_CamelModel):
    """A single UI element identified by the vision model."""

    id: int
    type: str = "unknown"
    label: str | None = None
    text_content: str | None = None
    geometry: Geometry = Geometry()
    typography: Typography | None = None
    appearance: Appearance | None = None
    state: str = "active"
    description: str | None = None
    contrast_ratio: float | None = None


class ColorPalette(BaseModel):
    """Deduplicated colors grouped by role."""

    model_config = ConfigDict(populate_by_name=True)

    backgrounds: list[str] = Field(default=[], alias="Backgrounds")
    text_colors: list[str] = Field(default=[], alias="TextColors")
    accent_colors: list[str] = Field(default=[], alias="AccentColors")


class TypographyStyle(_CamelModel):
    """One entry of a typography system (color is per-element, not here)."""

    font_family: str | None = None
    font_size: Number | None = None
    font_weight: str | None = None


class AuditMetric(BaseModel):
    """A single qualitative audit finding."""

    assessment: str | None = None
    details: str | None = None


AUDIT_CATEGORIES = ("accessibility", "consistency", "layout", "clarity")


class VisualAudit(BaseModel):
    """Audit metrics grouped under the four fixed categories."""

    accessibility: dict[str, AuditMetric] = {}
    consistency: dict[str, AuditMetric] = {}
    layout: dict[str, AuditMetric] = {}
    clarity: dict[str, AuditMetric] = {}

    def is_empty(self) -> bool:
        return not any(getattr(self, cat) for cat in AUDIT_CATEGORIES)


class AnalysisResult(_CamelModel):
    """Everything extracted from one vision-model response. Immutable once stored."""

    model_config = ConfigDict(frozen=True)

    description: str
    elements: list[UIElement] = []
    color_palette: ColorPalette | None = None
    typography_system: list[TypographyStyle] | None = None
    visual_audit: VisualAudit | None = None


_M = TypeVar("_M", bound=BaseModel)


def collapse_empty(model: _M | None) -> _M | None:
    """Return ``None`` when every field of ``model`` is absent.

    An Appearance of all-None values carries no information and is reported
    as "no appearance data" rather than an object of nulls.
    """
    if model is None:
        return None
    if all(value is None for value in model.__dict__.values()):
        return None
    return model
