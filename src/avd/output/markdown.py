"""Markdown report builder — renders ReportData to a readable document."""

from __future__ import annotations

from avd.analysis.colors import wcag_level
from avd.schemas.elements import AUDIT_CATEGORIES
from avd.schemas.report import ReportData


def _fmt(value: object) -> str:
    return "—" if value is None or value == "" else str(value)


def render_markdown_report(report: ReportData) -> str:
    """Render a ReportData into a Markdown string."""
    sections: list[str] = []

    sections.append(f"# {report.title}\n")
    sections.append(f"*Generated: {report.timestamp}*\n")

    # Environment
    sections.append("## Test Environment\n")
    sections.append(f"- **URL:** {report.url}")
    sections.append("- **Testing Method:** Screenshot capture with AI vision analysis")
    if report.screenshot:
        sections.append(f"- **Screenshot:** ![screenshot]({report.screenshot})")
    sections.append(f"- **Elements identified:** {report.element_count}")
    sections.append("")

    sections.append("## Description\n")
    sections.append(report.description + "\n")

    # Colors
    palette = report.color_palette
    sections.append("## Color Palette\n")
    sections.append(f"- **Backgrounds:** {', '.join(palette.backgrounds) or 'none'}")
    sections.append(f"- **Text colors:** {', '.join(palette.text_colors) or 'none'}")
    if palette.accent_colors:
        sections.append(f"- **Accent colors:** {', '.join(palette.accent_colors)}")
    sections.append("")

    # Typography
    if report.typography_system:
        sections.append("## Typography System\n")
        sections.append("| Font Family | Size | Weight |")
        sections.append("|-------------|------|--------|")
        for style in report.typography_system:
            sections.append(
                f"| {_fmt(style.font_family)} | {_fmt(style.font_size)} | {_fmt(style.font_weight)} |"
            )
        sections.append("")

    # Elements
    if report.elements:
        sections.append("## Component Analysis\n")
        sections.append("| # | Type | Label | Position (x, y, w, h) | Contrast | WCAG |")
        sections.append("|---|------|-------|-----------------------|----------|------|")
        for el in report.elements:
            g = el.geometry
            box = f"{_fmt(g.x)}, {_fmt(g.y)}, {_fmt(g.width)}, {_fmt(g.height)}"
            sections.append(
                f"| {el.id} | {el.type} | {_fmt(el.label)} | {box} | "
                f"{_fmt(el.contrast_ratio)} | {wcag_level(el.contrast_ratio)} |"
            )
        sections.append("")

        low_contrast = [el for el in report.elements if wcag_level(el.contrast_ratio) == "fail"]
        if low_contrast:
            sections.append("### Contrast Issues\n")
            for el in low_contrast:
                sections.append(
                    f"- **{el.label or el.type}** (#{el.id}): ratio {el.contrast_ratio} "
                    "is below the WCAG AA minimum of 4.5"
                )
            sections.append("")

    # Visual audit
    audit = report.visual_audit
    if audit is not None and not audit.is_empty():
        sections.append("## Visual Audit\n")
        for category in AUDIT_CATEGORIES:
            metrics = getattr(audit, category)
            if not metrics:
                continue
            sections.append(f"### {category.capitalize()}\n")
            for name, metric in metrics.items():
                sections.append(f"- **{name}**: {_fmt(metric.assessment)} — {_fmt(metric.details)}")
            sections.append("")

    return "\n".join(sections)
