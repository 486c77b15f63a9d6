"""Tests for color math, palette/typography derivation and contrast annotation."""

from __future__ import annotations

import pytest

from avd.analysis.colors import (
    contrast_ratio,
    hex_to_rgb,
    is_hex,
    parse_color,
    simple_luminance,
    wcag_level,
)
from avd.analysis.contrast import annotate_contrast, element_contrast
from avd.analysis.derive import collect_colors, derive, derive_palette, derive_typography
from avd.schemas.elements import Appearance, ColorPalette, Typography, UIElement


def _element(
    element_id: int = 1,
    color: str | None = None,
    background: str | None = None,
    **typo: object,
) -> UIElement:
    return UIElement(
        id=element_id,
        typography=Typography(color=color, **typo),
        appearance=Appearance(background_color=background) if background else None,
    )


class TestColorParsing:
    def test_hex_forms(self) -> None:
        assert hex_to_rgb("#ff8000") == (255, 128, 0)
        assert hex_to_rgb("#FFF") == (255, 255, 255)
        assert is_hex("#abc")
        assert not is_hex("#abcd")
        assert not is_hex("white")

    def test_rgb_and_rgba(self) -> None:
        assert parse_color("rgb(37, 99, 235)") == (37, 99, 235)
        assert parse_color("rgba(0,0,0,0.5)") == (0, 0, 0)

    @pytest.mark.parametrize("bad", ["white", "#12345", "rgb(300, 0, 0)", "hsl(0, 0%, 0%)", ""])
    def test_unparseable(self, bad: str) -> None:
        with pytest.raises(ValueError):
            parse_color(bad)

    def test_simple_luminance_bounds(self) -> None:
        assert simple_luminance("#000000") == 0
        assert simple_luminance("#ffffff") == pytest.approx(1.0)


class TestContrastRatio:
    def test_black_on_white(self) -> None:
        assert contrast_ratio("#ffffff", "#000000") == 21.0
        assert contrast_ratio("#000000", "#ffffff") == 21.0

    def test_same_color(self) -> None:
        assert contrast_ratio("#777777", "#777777") == 1.0

    def test_rounded_to_two_places(self) -> None:
        ratio = contrast_ratio("#767676", "#ffffff")
        assert ratio == round(ratio, 2)
        assert 4.5 <= ratio < 4.6

    def test_wcag_levels(self) -> None:
        assert wcag_level(21.0) == "AAA"
        assert wcag_level(4.5) == "AA"
        assert wcag_level(3.0) == "fail"
        assert wcag_level(None) == "n/a"


class TestDerivePalette:
    def test_dark_and_light_split(self) -> None:
        palette = derive_palette([_element(color="#f0f0f0", background="#101010")])
        assert palette.backgrounds == ["#101010"]
        assert palette.text_colors == ["#f0f0f0"]
        assert palette.accent_colors == []

    def test_light_background_is_text_color(self) -> None:
        # Classification is by luminance, not by where the color was found
        palette = derive_palette([_element(color="#222222", background="#fafafa")])
        assert palette.backgrounds == ["#222222"]
        assert palette.text_colors == ["#fafafa"]

    def test_non_hex_goes_to_text_colors(self) -> None:
        palette = derive_palette([_element(color="rgb(0, 0, 0)", background="black")])
        assert palette.text_colors == ["black", "rgb(0, 0, 0)"]
        assert palette.backgrounds == ["#000000"]

    def test_fallback_background_when_nothing_dark(self) -> None:
        assert derive_palette([]).backgrounds == ["#000000"]
        assert derive_palette([_element(color="#ffffff")]).backgrounds == ["#000000"]

    def test_dedupes_in_first_seen_order(self) -> None:
        elements = [
            _element(1, color="#ffffff", background="#111111"),
            _element(2, color="#ffffff", background="#222222"),
            _element(3, color="#eeeeee", background="#111111"),
        ]
        assert collect_colors(elements) == ["#111111", "#ffffff", "#222222", "#eeeeee"]
        palette = derive_palette(elements)
        assert palette.backgrounds == ["#111111", "#222222"]
        assert palette.text_colors == ["#ffffff", "#eeeeee"]

    def test_elements_without_styling(self) -> None:
        assert collect_colors([UIElement(id=1)]) == []


class TestDeriveTypography:
    def test_distinct_triples(self) -> None:
        elements = [
            _element(1, font_family="Inter", font_size=16, font_weight="400"),
            _element(2, font_family="Inter", font_size=16, font_weight="400", color="#fff"),
            _element(3, font_family="Inter", font_size=24, font_weight="700"),
        ]
        styles = derive_typography(elements)
        assert [(s.font_family, s.font_size, s.font_weight) for s in styles] == [
            ("Inter", 16, "400"),
            ("Inter", 24, "700"),
        ]

    def test_missing_fields_become_unknown(self) -> None:
        styles = derive_typography([_element(1, font_size=12)])
        assert styles[0].font_family == "unknown"
        assert styles[0].font_size == 12
        assert styles[0].font_weight == "unknown"

    def test_unknown_and_absent_collapse_together(self) -> None:
        elements = [_element(1), _element(2, font_family="unknown")]
        assert len(derive_typography(elements)) == 1

    def test_no_typography(self) -> None:
        assert derive_typography([UIElement(id=1)]) == []

    def test_derive_returns_both(self) -> None:
        palette, typography = derive([_element(color="#ffffff", background="#000000", font_family="Inter")])
        assert palette.backgrounds == ["#000000"]
        assert typography[0].font_family == "Inter"


class TestElementContrast:
    def test_own_background(self) -> None:
        palette = ColorPalette(backgrounds=["#ffffff"])
        assert element_contrast(_element(color="#ffffff", background="#000000"), palette) == 21.0

    def test_palette_fallback_background(self) -> None:
        palette = ColorPalette(backgrounds=["#000000"])
        assert element_contrast(_element(color="#ffffff"), palette) == 21.0

    def test_missing_foreground(self) -> None:
        palette = ColorPalette(backgrounds=["#000000"])
        assert element_contrast(_element(background="#ffffff"), palette) is None
        assert element_contrast(UIElement(id=1), palette) is None

    def test_no_background_anywhere(self) -> None:
        assert element_contrast(_element(color="#ffffff"), ColorPalette()) is None

    def test_unparseable_color(self) -> None:
        palette = ColorPalette(backgrounds=["#000000"])
        assert element_contrast(_element(color="white"), palette) is None

    def test_annotate_returns_copies(self) -> None:
        original = _element(color="#ffffff", background="#000000")
        annotated = annotate_contrast([original], ColorPalette(backgrounds=["#000000"]))
        assert annotated[0].contrast_ratio == 21.0
        assert original.contrast_ratio is None
