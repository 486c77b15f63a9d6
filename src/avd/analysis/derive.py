"""Recompute the color palette and typography system from parsed elements.

The palette and typography sections the model writes itself are not
trusted for the report; these are rebuilt from the per-element data.
"""

from __future__ import annotations

import logging

from avd.analysis.colors import is_hex, simple_luminance
from avd.analysis.parser import FALLBACK_BACKGROUND
from avd.schemas.elements import ColorPalette, TypographyStyle, UIElement

logger = logging.getLogger(__name__)

_UNKNOWN = "unknown"


def collect_colors(elements: list[UIElement]) -> list[str]:
    """Every distinct background and text color, in first-seen order."""
    seen: dict[str, None] = {}
    for element in elements:
        if element.appearance and element.appearance.background_color:
            seen.setdefault(element.appearance.background_color, None)
        if element.typography and element.typography.color:
            seen.setdefault(element.typography.color, None)
    return list(seen)


def derive_palette(elements: list[UIElement]) -> ColorPalette:
    """Split colors into backgrounds (dark) and text colors (light).

    Hex colors with luminance below 0.5 are backgrounds. Everything else,
    including non-hex strings such as ``rgb(...)`` or ``white``, is a text
    color. No accent colors are inferred.
    """
    backgrounds: list[str] = []
    text_colors: list[str] = []
    for color in collect_colors(elements):
        if is_hex(color) and simple_luminance(color) < 0.5:
            backgrounds.append(color)
        else:
            text_colors.append(color)

    if not backgrounds:
        logger.debug("No dark colors found, using fallback background %s", FALLBACK_BACKGROUND)
        backgrounds.append(FALLBACK_BACKGROUND)

    return ColorPalette(backgrounds=backgrounds, text_colors=text_colors, accent_colors=[])


def derive_typography(elements: list[UIElement]) -> list[TypographyStyle]:
    """Distinct (family, size, weight) triples in first-seen order."""
    styles: dict[tuple[str, str, str], TypographyStyle] = {}
    for element in elements:
        typo = element.typography
        if typo is None:
            continue
        key = (
            str(typo.font_family or _UNKNOWN),
            str(typo.font_size if typo.font_size is not None else _UNKNOWN),
            str(typo.font_weight or _UNKNOWN),
        )
        if key not in styles:
            styles[key] = TypographyStyle(
                font_family=typo.font_family or _UNKNOWN,
                font_size=typo.font_size if typo.font_size is not None else _UNKNOWN,
                font_weight=typo.font_weight or _UNKNOWN,
            )
    return list(styles.values())


def derive(elements: list[UIElement]) -> tuple[ColorPalette, list[TypographyStyle]]:
    palette = derive_palette(elements)
    typography = derive_typography(elements)
    logger.info(
        "Derived %d background(s), %d text color(s), %d typography style(s)",
        len(palette.backgrounds), len(palette.text_colors), len(typography),
    )
    return palette, typography
