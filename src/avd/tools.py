"""Tool definitions and dispatcher exposed to the tool-call protocol layer."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from avd.pipeline.errors import InputError, StageError
from avd.pipeline.orchestrator import DebugPipeline
from avd.pipeline.session import SessionStore
from avd.schemas.session import CaptureOptions, ReportBundle
from avd.shared.files import modify_lines, read_lines

logger = logging.getLogger(__name__)

INVALID_PARAMS = "invalid_params"
INTERNAL_ERROR = "internal_error"
METHOD_NOT_FOUND = "method_not_found"


class ToolCallError(Exception):
    """A rejected tool call, carrying a protocol-level error code."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


_SESSION_ID = {
    "type": "string",
    "description": "Correlation id of the workflow. Calls without one share the default session.",
}
_CAPTURE_PROPERTIES = {
    "fullPage": {"type": "boolean", "description": "Capture the full scrollable page."},
    "waitForSelector": {"type": "string", "description": "CSS selector to wait for before capturing."},
    "waitTime": {"type": "number", "description": "Extra milliseconds to wait before capturing."},
}
_REPORT_PROPERTIES = {
    "appName": {"type": "string", "description": "Name of the application being analyzed."},
    "outputPath": {"type": "string", "description": "Directory under which the report folder is created."},
}
_LINE_RANGE = {
    "path": {"type": "string", "description": "Path to the file."},
    "startLine": {"type": "number", "description": "Starting line number (1-indexed)."},
    "endLine": {"type": "number", "description": "Ending line number (1-indexed, inclusive)."},
}

TOOLS: list[dict[str, Any]] = [
    {
        "name": "screenshot_url",
        "description": "Take a screenshot of a URL and make it the session's current screenshot.",
        "input_schema": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "The URL to capture."},
                **_CAPTURE_PROPERTIES,
                "sessionId": _SESSION_ID,
            },
            "required": ["url"],
        },
    },
    {
        "name": "analyze_screen",
        "description": (
            "Analyze the session's latest screenshot (or the reference screenshot) "
            "with AI vision and extract UI elements."
        ),
        "input_schema": {
            "type": "object",
            "properties": {"sessionId": _SESSION_ID},
            "required": [],
        },
    },
    {
        "name": "generate_report",
        "description": "Generate a UI/UX report bundle from the session's latest analysis.",
        "input_schema": {
            "type": "object",
            "properties": {
                "testUrl": {"type": "string", "description": "URL of the application being tested."},
                **_REPORT_PROPERTIES,
                "sessionId": _SESSION_ID,
            },
            "required": ["testUrl"],
        },
    },
    {
        "name": "analyze_url_full_report",
        "description": "Screenshot a URL, analyze it and generate the report in one call.",
        "input_schema": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "description": "The URL to analyze."},
                **_REPORT_PROPERTIES,
                **_CAPTURE_PROPERTIES,
                "sessionId": _SESSION_ID,
            },
            "required": ["url"],
        },
    },
    {
        "name": "read_file",
        "description": "Read content from a file between specified line numbers.",
        "input_schema": {
            "type": "object",
            "properties": dict(_LINE_RANGE),
            "required": ["path", "startLine", "endLine"],
        },
    },
    {
        "name": "modify_file",
        "description": "Replace content in a file between specified line numbers.",
        "input_schema": {
            "type": "object",
            "properties": {
                **_LINE_RANGE,
                "content": {"type": "string", "description": "New content for the line range."},
            },
            "required": ["path", "startLine", "endLine", "content"],
        },
    },
]

ToolHandler = Callable[[str, dict[str, Any]], Awaitable[str]]


def _capture_options(args: dict[str, Any]) -> CaptureOptions:
    try:
        return CaptureOptions.model_validate({
            key: args[key] for key in ("fullPage", "waitForSelector", "waitTime") if key in args
        })
    except ValidationError as exc:
        raise ToolCallError(INVALID_PARAMS, f"Invalid capture options: {exc}") from exc


def _optional_str(args: dict[str, Any], key: str) -> str | None:
    value = args.get(key)
    if value is not None and not isinstance(value, str):
        raise ToolCallError(INVALID_PARAMS, f"{key} must be a string")
    return value


def _line_range(args: dict[str, Any]) -> tuple[str, int, int]:
    path, start, end = args.get("path"), args.get("startLine"), args.get("endLine")
    if not path or not isinstance(start, (int, float)) or not isinstance(end, (int, float)):
        raise ToolCallError(INVALID_PARAMS, "path, startLine and endLine are required")
    return str(path), int(start), int(end)


def format_bundle(bundle: ReportBundle) -> str:
    lines = [
        f"Report generated in {bundle.report_dir}",
        f"- Data: {bundle.data_file}",
    ]
    if bundle.markdown_file:
        lines.append(f"- Markdown: {bundle.markdown_file}")
    lines.append(f"- Screenshot: {bundle.screenshot_file or '(not copied)'}")
    return "\n".join(lines)


def make_tool_handler(pipeline: DebugPipeline, sessions: SessionStore) -> ToolHandler:
    """Create the async dispatcher for every tool in ``TOOLS``.

    Returns text on success. Failures raise :class:`ToolCallError` with
    ``invalid_params`` for input errors and ``internal_error`` for failed
    stages.
    """

    async def _dispatch(name: str, args: dict[str, Any]) -> str:
        sid = _optional_str(args, "sessionId")
        match name:
            case "screenshot_url":
                options = _capture_options(args)
                async with sessions.lock(sid):
                    path = await pipeline.capture(sessions.get(sid), args.get("url", ""), options)
                return f"Screenshot saved to {path}"
            case "analyze_screen":
                async with sessions.lock(sid):
                    result = await pipeline.analyze(sessions.get(sid))
                summary = "\n".join(
                    f"{el.id}. {el.type}: {el.label or el.text_content or ''}".rstrip(": ")
                    for el in result.elements
                )
                return (
                    f"{result.description}\n\n"
                    f"Identified {len(result.elements)} UI elements:\n{summary}"
                ).rstrip()
            case "generate_report":
                async with sessions.lock(sid):
                    session = sessions.get(sid)
                    bundle = await pipeline.report(
                        session,
                        args.get("testUrl", ""),
                        app_name=_optional_str(args, "appName"),
                        output_path=_optional_str(args, "outputPath"),
                    )
                    session.record(f"Generated report for {args['testUrl']} at {bundle.report_dir}")
                return format_bundle(bundle)
            case "analyze_url_full_report":
                options = _capture_options(args)
                async with sessions.lock(sid):
                    session = sessions.get(sid)
                    bundle = await pipeline.run_full(
                        session,
                        args.get("url", ""),
                        options,
                        app_name=_optional_str(args, "appName"),
                        output_path=_optional_str(args, "outputPath"),
                    )
                    session.record(f"Generated report for {args['url']} at {bundle.report_dir}")
                return format_bundle(bundle)
            case "read_file":
                path, start, end = _line_range(args)
                return read_lines(path, start, end)
            case "modify_file":
                path, start, end = _line_range(args)
                if "content" not in args:
                    raise ToolCallError(INVALID_PARAMS, "content is required")
                return modify_lines(path, start, end, str(args["content"]))
            case _:
                raise ToolCallError(METHOD_NOT_FOUND, f"Unknown tool: {name}")

    async def handle_tool(name: str, args: dict[str, Any] | None) -> str:
        logger.info("Tool call: %s(%s)", name, str(args)[:200])
        try:
            return await _dispatch(name, args or {})
        except ToolCallError:
            raise
        except InputError as exc:
            raise ToolCallError(INVALID_PARAMS, str(exc)) from exc
        except (FileNotFoundError, ValueError) as exc:
            raise ToolCallError(INVALID_PARAMS, f"{name}: {exc}") from exc
        except (StageError, OSError) as exc:
            raise ToolCallError(INTERNAL_ERROR, f"Failed to run {name}: {exc}") from exc

    return handle_tool
