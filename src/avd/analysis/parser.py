"""Response parser — turns the vision model's marker-delimited text into an AnalysisResult.

Parsing contract:

- :func:`parse_response` never raises. Each section has its own sub-parser.
- A bad unit is skipped and the rest is kept. The unit is one element
  block in the element list, one line in the palette, typography and audit
  sections, and the whole section for the description.
- Skips are logged (``WARNING`` for dropped elements and orphan audit
  metrics, ``DEBUG`` for unrecognized lines).
- Missing sections yield safe defaults: a sentinel description, an empty
  element list, an empty palette (plus the fallback background), an empty
  typography list and an empty audit.
"""

from __future__ import annotations

import logging
import re
from typing import TypeVar

from pydantic import BaseModel

from avd.analysis import markers
from avd.schemas.elements import (
    AUDIT_CATEGORIES,
    AnalysisResult,
    Appearance,
    AuditMetric,
    ColorPalette,
    Geometry,
    Typography,
    TypographyStyle,
    UIElement,
    VisualAudit,
    collapse_empty,
)

logger = logging.getLogger(__name__)

DESCRIPTION_FALLBACK = "Failed to parse description from AI response."
FALLBACK_BACKGROUND = "#000000"

# Section names as they appear in the markers
DESCRIPTION_SECTION = "Description"
PALETTE_SECTION = "Color Palette"
TYPOGRAPHY_SECTION = "Typography"
AUDIT_SECTION = "Visual Audit"

_SCALAR_KEYS = {
    "type": "type",
    "label": "label",
    "textcontent": "text_content",
    "state": "state",
    "description": "description",
}

# field name -> (brace key as written by the model, numeric?)
_GEOMETRY_KEYS = {
    "x": ("x", True),
    "y": ("y", True),
    "width": ("width", True),
    "height": ("height", True),
}
_TYPOGRAPHY_KEYS = {
    "font_family": ("fontFamily", False),
    "font_size": ("fontSize", True),
    "font_weight": ("fontWeight", False),
    "color": ("color", False),
}
_APPEARANCE_KEYS = {
    "background_color": ("backgroundColor", False),
    "border_color": ("borderColor", False),
    "border_width": ("borderWidth", True),
    "border_radius": ("borderRadius", True),
}

_PALETTE_KEYS = {
    "backgrounds": "backgrounds",
    "background": "backgrounds",
    "backgroundcolors": "backgrounds",
    "textcolors": "text_colors",
    "textcolor": "text_colors",
    "text": "text_colors",
    "accentcolors": "accent_colors",
    "accentcolor": "accent_colors",
    "accents": "accent_colors",
}

_TYPOGRAPHY_SUMMARY_KEYS = {
    "fontfamily": "font_family",
    "fontsize": "font_size",
    "fontweight": "font_weight",
}

_LIST_PUNCTUATION = "\"'`[]"
_METRIC_RE = re.compile(r"^[-*]\s*([^:{]+?)\s*:\s*(\{.*\})\s*$")

_M = TypeVar("_M", bound=BaseModel)


# ----------------------------------------------------------------------
# Description
# ----------------------------------------------------------------------


def parse_description(text: str) -> str:
    body = markers.section(text, DESCRIPTION_SECTION)
    if not body:
        logger.warning("Description markers not found, using fallback description")
        return DESCRIPTION_FALLBACK
    return body


# ----------------------------------------------------------------------
# Elements
# ----------------------------------------------------------------------


def parse_nested(
    value: str | None,
    model_cls: type[_M],
    keys: dict[str, tuple[str, bool]],
) -> _M | None:
    """Parse an inline ``{ key: value, ... }`` object into ``model_cls``.

    Each sub-key is extracted on its own, so one malformed pair does not
    spoil the others. Returns None when there is no brace object or when
    every sub-key is absent.
    """
    if value is None:
        return None
    inner = markers.braced(value)
    if inner is None:
        return None

    fields: dict[str, object] = {}
    for field, (key, numeric) in keys.items():
        raw = markers.subkey(inner, key)
        if raw is None:
            continue
        fields[field] = markers.coerce_number(raw) if numeric else raw

    if not fields:
        return None
    return collapse_empty(model_cls(**fields))


def parse_element_id(raw: str | None) -> int | None:
    """Parse an element id; ``"3"``, ``"#3"`` and ``"3."`` are all 3."""
    value = markers.clean_value(raw)
    if value is None:
        return None
    value = value.lstrip("#").rstrip(".").strip()
    try:
        return int(value)
    except ValueError:
        return None


def parse_element_block(block: str) -> UIElement | None:
    """Parse one element block. Returns None if it has no integer id."""
    pairs = markers.tokenize_block(block)

    element_id = parse_element_id(pairs.get("id"))
    if element_id is None:
        logger.warning("Dropping element block without a valid integer id: %r", pairs.get("id"))
        return None

    fields: dict[str, object] = {"id": element_id}
    for key, field in _SCALAR_KEYS.items():
        value = markers.clean_scalar(pairs.get(key))
        if value is not None:
            fields[field] = value

    fields["geometry"] = parse_nested(pairs.get("geometry"), Geometry, _GEOMETRY_KEYS) or Geometry()
    fields["typography"] = (
        parse_nested(pairs.get("typography"), Typography, _TYPOGRAPHY_KEYS) or Typography()
    )
    # Unlike typography, an empty appearance carries no meaning and is dropped
    fields["appearance"] = collapse_empty(
        parse_nested(pairs.get("appearance"), Appearance, _APPEARANCE_KEYS) or Appearance()
    )

    return UIElement(**fields)


def parse_elements(text: str) -> list[UIElement]:
    """Parse every element block, skipping the ones that fail."""
    elements: list[UIElement] = []
    blocks = markers.split_element_blocks(text)
    for index, block in enumerate(blocks, 1):
        try:
            element = parse_element_block(block)
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping malformed element block %d: %s", index, exc)
            continue
        if element is not None:
            elements.append(element)

    logger.debug("Accepted %d of %d element blocks", len(elements), len(blocks))
    return elements


# ----------------------------------------------------------------------
# Color palette
# ----------------------------------------------------------------------


def _clean_list_item(item: str) -> str | None:
    value = item.strip().strip(_LIST_PUNCTUATION).strip()
    if not value or value.lower() == "null":
        return None
    return value


def parse_color_palette(body: str | None) -> ColorPalette:
    """Parse ``Key: a, b, c`` lines into a palette.

    The background fallback is applied so the list is never empty.
    """
    groups: dict[str, list[str]] = {"backgrounds": [], "text_colors": [], "accent_colors": []}
    for line in (body or "").splitlines():
        line = line.strip().lstrip("-*").strip()
        if not line or ":" not in line:
            continue
        key, _, values = line.partition(":")
        target = _PALETTE_KEYS.get(markers.normalize_key(key.strip("*")))
        if target is None:
            logger.debug("Ignoring unknown palette line: %r", line)
            continue
        for item in markers.split_list(values):
            value = _clean_list_item(item)
            if value is not None and value not in groups[target]:
                groups[target].append(value)

    if not groups["backgrounds"]:
        groups["backgrounds"].append(FALLBACK_BACKGROUND)
    return ColorPalette(**groups)


# ----------------------------------------------------------------------
# Typography summary
# ----------------------------------------------------------------------


def parse_typography_line(line: str) -> TypographyStyle | None:
    """Parse ``- { fontFamily: Inter, fontSize: 16, fontWeight: bold }``.

    Pairs are split on ``,`` then ``:``, so a quoted value containing a
    comma (``"Inter, sans-serif"``) is cut short at that comma.
    """
    inner = markers.braced(line)
    if inner is None:
        return None

    fields: dict[str, object] = {}
    for pair in inner.split(","):
        if ":" not in pair:
            continue
        key, _, value = pair.partition(":")
        field = _TYPOGRAPHY_SUMMARY_KEYS.get(markers.normalize_key(key.strip().strip("\"'")))
        cleaned = markers.clean_value(value)
        if field is None or cleaned is None:
            continue
        fields[field] = markers.coerce_number(cleaned) if field == "font_size" else cleaned

    if not fields:
        return None
    return TypographyStyle(**fields)


def parse_typography_summary(body: str | None) -> list[TypographyStyle]:
    styles: list[TypographyStyle] = []
    for line in (body or "").splitlines():
        line = line.strip()
        if not line.startswith("-"):
            continue
        try:
            style = parse_typography_line(line)
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping malformed typography line %r: %s", line, exc)
            continue
        if style is not None:
            styles.append(style)
    return styles


# ----------------------------------------------------------------------
# Visual audit
# ----------------------------------------------------------------------


def metric_key(name: str) -> str:
    """``Text Contrast`` → ``textContrast``."""
    name = name.strip().strip("*").strip()
    if not name:
        return name
    return re.sub(r"\s+", "", name[0].lower() + name[1:])


def _audit_category(line: str) -> str | None:
    header = line.strip().lstrip("#").strip().strip("*").rstrip(":").strip("*").strip().lower()
    return header if header in AUDIT_CATEGORIES else None


def parse_visual_audit(body: str | None) -> VisualAudit:
    """Parse category headers and ``- Metric: { assessment: ..., details: ... }`` lines."""
    audit = VisualAudit()
    category: str | None = None
    for line in (body or "").splitlines():
        line = line.strip()
        if not line:
            continue

        header = _audit_category(line)
        if header is not None:
            category = header
            continue

        match = _METRIC_RE.match(line)
        if not match:
            logger.debug("Ignoring unrecognized audit line: %r", line)
            continue
        if category is None:
            logger.warning("Dropping audit metric outside any category: %r", line)
            continue

        try:
            inner = markers.braced(match.group(2)) or ""
            metric = AuditMetric(
                assessment=markers.subkey(inner, "assessment"),
                details=markers.subkey(inner, "details"),
            )
        except (ValueError, TypeError) as exc:
            logger.warning("Skipping malformed audit line %r: %s", line, exc)
            continue
        getattr(audit, category)[metric_key(match.group(1))] = metric
    return audit


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------


def parse_response(raw_text: str) -> AnalysisResult:
    """Parse a full model response. Never raises."""
    raw_text = raw_text or ""

    try:
        description = parse_description(raw_text)
    except (ValueError, TypeError) as exc:
        logger.warning("Description section failed to parse: %s", exc)
        description = DESCRIPTION_FALLBACK

    elements = parse_elements(raw_text)

    palette_body = markers.section(raw_text, PALETTE_SECTION)
    if palette_body is None:
        logger.debug("No color palette section in response")
    color_palette = parse_color_palette(palette_body)

    typography_system = parse_typography_summary(markers.section(raw_text, TYPOGRAPHY_SECTION))

    audit_body = markers.section(raw_text, AUDIT_SECTION)
    if audit_body is None:
        logger.debug("No visual audit section in response")
    visual_audit = parse_visual_audit(audit_body)

    logger.info(
        "Parsed response: %d elements, %d typography styles, %d background colors",
        len(elements), len(typography_system), len(color_palette.backgrounds),
    )
    return AnalysisResult(
        description=description,
        elements=elements,
        color_palette=color_palette,
        typography_system=typography_system,
        visual_audit=visual_audit,
    )
