"""Pipeline orchestrator — screenshot → analysis → report over an explicit session."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

import httpx

from avd.analysis.contrast import annotate_contrast
from avd.analysis.derive import derive
from avd.analysis.parser import parse_response
from avd.analysis.prompts import ANALYSIS_PROMPT
from avd.output.report import write_report_bundle
from avd.pipeline.errors import InputError, StageError
from avd.schemas.config import DebugConfig
from avd.schemas.elements import AnalysisResult
from avd.schemas.session import CaptureOptions, DebugSession, ReportBundle
from avd.shared.browser import ScreenshotTaker
from avd.shared.vision_client import VisionAnalyzer

logger = logging.getLogger(__name__)

_ALLOWED_SCHEMES = {"http", "https", "file"}


def validate_url(url: object) -> str:
    """Return the stripped URL, or raise InputError if it isn't usable."""
    if not isinstance(url, str):
        raise InputError(f"URL must be a string, got {type(url).__name__}")
    if not url.strip():
        raise InputError("A URL is required")
    url = url.strip()
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise InputError(f"Invalid URL {url!r}: {exc}") from exc
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise InputError(f"Unsupported URL scheme in {url!r} (expected http, https or file)")
    if parsed.scheme != "file" and not parsed.host:
        raise InputError(f"URL has no host: {url!r}")
    return url


class DebugPipeline:
    """Runs the capture, analyze and report steps against a session.

    Steps only check their own preconditions; nothing forces them to run in
    order. ``run_full`` chains all three and stops at the first failure.

    Collaborator failures are wrapped in :class:`StageError` naming the
    step; bad arguments and missing session state raise :class:`InputError`.
    """

    def __init__(
        self,
        config: DebugConfig,
        browser: ScreenshotTaker,
        vision: VisionAnalyzer,
    ) -> None:
        self.config = config
        self.browser = browser
        self.vision = vision

    # ------------------------------------------------------------------
    # capture
    # ------------------------------------------------------------------

    async def capture(
        self,
        session: DebugSession,
        url: str,
        options: CaptureOptions | None = None,
    ) -> str:
        """Screenshot ``url`` and make it the session's current screenshot."""
        url = validate_url(url)
        options = options or CaptureOptions()
        dest = Path(self.config.temp_directory) / f"screenshot_{uuid.uuid4()}.png"

        try:
            path = await self.browser.capture(url, dest, options)
        except Exception as exc:
            logger.exception("Screenshot of %s failed", url)
            raise StageError("capture", exc) from exc

        session.current_url = url
        session.last_screenshot_path = str(path)
        session.record(f"Captured screenshot of {url} -> {path}")
        return str(path)

    # ------------------------------------------------------------------
    # analyze
    # ------------------------------------------------------------------

    def _screenshot_for_analysis(self, session: DebugSession) -> str:
        if session.last_screenshot_path:
            if not Path(session.last_screenshot_path).is_file():
                raise InputError(
                    f"Session screenshot no longer exists: {session.last_screenshot_path}"
                )
            return session.last_screenshot_path

        reference = Path(self.config.reference_screenshot).expanduser()
        if not reference.is_file():
            raise InputError(
                f"No screenshot in session and reference screenshot not found at {reference}"
            )
        logger.info("No session screenshot, analyzing reference screenshot %s", reference)
        # Later report steps need a screenshot path to copy
        session.last_screenshot_path = str(reference)
        return str(reference)

    async def analyze(self, session: DebugSession) -> AnalysisResult:
        """Send the session's screenshot to the vision model and store the parsed result.

        Running it again simply replaces the previous result.
        """
        path = self._screenshot_for_analysis(session)

        try:
            raw = await self.vision.analyze_image(path, ANALYSIS_PROMPT)
        except Exception as exc:
            logger.exception("Vision analysis of %s failed", path)
            raise StageError("analyze", exc) from exc

        result = parse_response(raw)
        session.last_analysis_result = result
        session.elements = [element.model_copy(deep=True) for element in result.elements]
        session.record(f"Analyzed {path}: {len(result.elements)} elements identified")
        return result

    # ------------------------------------------------------------------
    # report
    # ------------------------------------------------------------------

    async def report(
        self,
        session: DebugSession,
        test_url: str,
        app_name: str | None = None,
        output_path: str | None = None,
    ) -> ReportBundle:
        """Write a report bundle from the session's cached analysis.

        Derives the palette and typography from the elements, attaches
        contrast ratios, and leaves the session untouched.
        """
        if not isinstance(test_url, str) or not test_url.strip():
            raise InputError("testUrl is required and must be a string")

        screenshot_path = session.last_screenshot_path
        analysis = session.last_analysis_result
        missing = []
        if not screenshot_path:
            missing.append("screenshot (run screenshot_url first)")
        if analysis is None:
            missing.append("analysis result (run analyze_screen first)")
        if missing or analysis is None or screenshot_path is None:
            raise InputError(f"Cannot generate report, session has no {' and no '.join(missing)}")

        palette, typography = derive(analysis.elements)
        elements = annotate_contrast(analysis.elements, palette)

        try:
            # File I/O runs in a worker thread
            return await asyncio.to_thread(
                write_report_bundle,
                analysis,
                screenshot_path,
                test_url=test_url.strip(),
                app_name=app_name,
                palette=palette,
                typography=typography,
                elements=elements,
                output_root=output_path or self.config.output_directory,
            )
        except OSError as exc:
            logger.exception("Writing report failed")
            raise StageError("report", exc) from exc

    # ------------------------------------------------------------------
    # combined
    # ------------------------------------------------------------------

    async def run_full(
        self,
        session: DebugSession,
        url: str,
        options: CaptureOptions | None = None,
        app_name: str | None = None,
        output_path: str | None = None,
    ) -> ReportBundle:
        """capture → analyze → report, stopping at the first failure."""
        await self.capture(session, url, options)
        await self.analyze(session)
        return await self.report(session, url, app_name=app_name, output_path=output_path)
