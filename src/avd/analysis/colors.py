"""Color string parsing, luminance and WCAG contrast."""

from __future__ import annotations

import re

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+%?\s*)?\)$",
    re.IGNORECASE,
)

RGB = tuple[int, int, int]


def is_hex(color: str) -> bool:
    return bool(_HEX_RE.match(color.strip()))


def hex_to_rgb(color: str) -> RGB:
    """``#1a2b3c`` or ``#abc`` → (r, g, b). Raises ValueError otherwise."""
    match = _HEX_RE.match(color.strip())
    if not match:
        raise ValueError(f"Not a hex color: {color!r}")
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def parse_color(color: str) -> RGB:
    """Parse a hex or ``rgb()``/``rgba()`` string. Raises ValueError otherwise."""
    color = color.strip()
    if color.startswith("#"):
        return hex_to_rgb(color)
    match = _RGB_RE.match(color)
    if not match:
        raise ValueError(f"Unsupported color format: {color!r}")
    channels = tuple(int(c) for c in match.groups())
    if any(c > 255 for c in channels):
        raise ValueError(f"Color channel out of range: {color!r}")
    return channels  # type: ignore[return-value]


def simple_luminance(color: str) -> float:
    """Perceived brightness in [0, 1] from raw 8-bit channels (no gamma)."""
    r, g, b = hex_to_rgb(color)
    return (0.2126 * r + 0.7152 * g + 0.0722 * b) / 255


def relative_luminance(rgb: RGB) -> float:
    """WCAG 2.x relative luminance (sRGB linearized)."""

    def channel(c: int) -> float:
        c = c / 255.0
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = rgb
    return 0.2126 * channel(r) + 0.7152 * channel(g) + 0.0722 * channel(b)


def contrast_ratio(foreground: str, background: str) -> float:
    """WCAG contrast ratio between two color strings, rounded to 2 decimals.

    Raises ValueError if either color can't be parsed.
    """
    lum_fg = relative_luminance(parse_color(foreground))
    lum_bg = relative_luminance(parse_color(background))
    lighter = max(lum_fg, lum_bg)
    darker = min(lum_fg, lum_bg)
    return round((lighter + 0.05) / (darker + 0.05), 2)


def wcag_level(ratio: float | None) -> str:
    """Normal-text WCAG verdict for a contrast ratio."""
    if ratio is None:
        return "n/a"
    if ratio >= 7:
        return "AAA"
    if ratio >= 4.5:
        return "AA"
    return "fail"
