"""Report assembler — writes the report bundle (JSON data, Markdown, screenshot copy)."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from avd.output.markdown import render_markdown_report
from avd.schemas.elements import AnalysisResult, ColorPalette, TypographyStyle, UIElement
from avd.schemas.report import ReportData
from avd.schemas.session import ReportBundle

logger = logging.getLogger(__name__)

DEFAULT_APP_NAME = "Web Application"


def report_stamp(now: datetime) -> str:
    """Millisecond-resolution timestamp used in directory and file names."""
    return now.strftime("%Y%m%d_%H%M%S_") + f"{now.microsecond // 1000:03d}"


def build_report_data(
    analysis: AnalysisResult,
    *,
    test_url: str,
    app_name: str | None,
    palette: ColorPalette,
    typography: list[TypographyStyle],
    elements: list[UIElement],
    screenshot: str | None,
    now: datetime,
) -> ReportData:
    return ReportData(
        title=f"UI/UX Analysis Report: {app_name or DEFAULT_APP_NAME}",
        timestamp=now.isoformat(),
        url=test_url,
        screenshot=screenshot,
        description=analysis.description,
        color_palette=palette,
        typography_system=typography,
        visual_audit=analysis.visual_audit,
        element_count=len(elements),
        elements=elements,
    )


def _copy_screenshot(screenshot_path: str, report_dir: Path) -> Path | None:
    """Copy the screenshot into the bundle. Returns None when the copy fails."""
    src = Path(screenshot_path)
    dest = report_dir / f"screenshot{src.suffix or '.png'}"
    try:
        shutil.copy2(src, dest)
    except OSError as exc:
        logger.warning("Could not copy screenshot %s into report: %s", src, exc)
        return None
    return dest


def write_report_bundle(
    analysis: AnalysisResult,
    screenshot_path: str,
    *,
    test_url: str,
    palette: ColorPalette,
    typography: list[TypographyStyle],
    elements: list[UIElement],
    output_root: str | Path,
    app_name: str | None = None,
    now: datetime | None = None,
) -> ReportBundle:
    """Create a fresh report directory under ``output_root`` and fill it.

    Layout::

        <output_root>/report_<stamp>/
            report_data_<stamp>.json
            report_<stamp>.md
            screenshot.png          (absent if the copy failed)
    """
    now = now or datetime.now()
    stamp = report_stamp(now)

    report_dir = Path(output_root) / f"report_{stamp}"
    report_dir.mkdir(parents=True, exist_ok=False)

    screenshot_copy = _copy_screenshot(screenshot_path, report_dir)

    data = build_report_data(
        analysis,
        test_url=test_url,
        app_name=app_name,
        palette=palette,
        typography=typography,
        elements=elements,
        screenshot=screenshot_copy.name if screenshot_copy else None,
        now=now,
    )

    data_path = report_dir / f"report_data_{stamp}.json"
    data_path.write_text(data.to_json())

    md_path = report_dir / f"report_{stamp}.md"
    md_path.write_text(render_markdown_report(data))

    logger.info("Report written to %s (%d elements)", report_dir, data.element_count)
    return ReportBundle(
        report_dir=str(report_dir),
        data_file=str(data_path),
        markdown_file=str(md_path),
        screenshot_file=str(screenshot_copy) if screenshot_copy else None,
    )
