"""Attach a WCAG contrast ratio to every element."""

from __future__ import annotations

import logging

from avd.analysis.colors import contrast_ratio
from avd.schemas.elements import ColorPalette, UIElement

logger = logging.getLogger(__name__)


def element_contrast(element: UIElement, palette: ColorPalette) -> float | None:
    """Contrast of the element's text color against its background.

    Falls back to the palette's first background when the element has none.
    Returns None if either color is missing or unparseable.
    """
    foreground = element.typography.color if element.typography else None

    background = element.appearance.background_color if element.appearance else None
    if not isinstance(background, str) or not background:
        background = palette.backgrounds[0] if palette.backgrounds else None
        if background is not None:
            logger.debug("Element %d: no background, using palette fallback %s", element.id, background)

    if not foreground or not background:
        missing = "foreground" if not foreground else "background"
        logger.debug("Element %d: contrast not computed, missing %s color", element.id, missing)
        return None

    try:
        return contrast_ratio(foreground, background)
    except ValueError as exc:
        logger.warning("Element %d: contrast not computed: %s", element.id, exc)
        return None


def annotate_contrast(elements: list[UIElement], palette: ColorPalette) -> list[UIElement]:
    """Return copies of ``elements`` with ``contrast_ratio`` filled in."""
    return [
        element.model_copy(update={"contrast_ratio": element_contrast(element, palette)})
        for element in elements
    ]
