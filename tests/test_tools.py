"""Tests for the tool definitions and dispatcher."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from avd.pipeline.orchestrator import DebugPipeline
from avd.pipeline.session import SessionStore
from avd.schemas.config import DebugConfig
from avd.shared.browser import DryRunBrowser
from avd.tools import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    TOOLS,
    ToolCallError,
    make_tool_handler,
)


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture
def handle(pipeline: DebugPipeline, sessions: SessionStore):
    return make_tool_handler(pipeline, sessions)


class TestToolDefinitions:
    def test_names(self) -> None:
        assert [t["name"] for t in TOOLS] == [
            "screenshot_url",
            "analyze_screen",
            "generate_report",
            "analyze_url_full_report",
            "read_file",
            "modify_file",
        ]

    def test_required_params(self) -> None:
        required = {t["name"]: t["input_schema"]["required"] for t in TOOLS}
        assert required["screenshot_url"] == ["url"]
        assert required["analyze_screen"] == []
        assert required["generate_report"] == ["testUrl"]
        assert required["modify_file"] == ["path", "startLine", "endLine", "content"]

    def test_session_tools_accept_session_id(self) -> None:
        for tool in TOOLS[:4]:
            assert "sessionId" in tool["input_schema"]["properties"]


class TestDispatch:
    @pytest.mark.asyncio
    async def test_unknown_tool(self, handle) -> None:
        with pytest.raises(ToolCallError) as exc_info:
            await handle("delete_everything", {})
        assert exc_info.value.code == METHOD_NOT_FOUND

    @pytest.mark.asyncio
    async def test_step_by_step(self, handle, sessions: SessionStore) -> None:
        text = await handle("screenshot_url", {"url": "https://example.com"})
        assert text.startswith("Screenshot saved to ")

        text = await handle("analyze_screen", {})
        assert "Identified 3 UI elements:" in text
        assert "3. Button: Sign in" in text

        text = await handle("generate_report", {"testUrl": "https://example.com", "appName": "Demo"})
        assert text.startswith("Report generated in ")
        assert "- Markdown: " in text

        history = sessions.get().debug_history
        assert len(history) == 3
        assert history[-1].startswith("Generated report for https://example.com at ")

    @pytest.mark.asyncio
    async def test_report_before_analysis(self, handle) -> None:
        await handle("screenshot_url", {"url": "https://example.com"})
        with pytest.raises(ToolCallError) as exc_info:
            await handle("generate_report", {"testUrl": "https://example.com"})
        assert exc_info.value.code == INVALID_PARAMS
        assert "analysis result" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_sessions_are_separate(self, handle) -> None:
        await handle("screenshot_url", {"url": "https://a.example", "sessionId": "a"})
        await handle("analyze_screen", {"sessionId": "a"})

        with pytest.raises(ToolCallError) as exc_info:
            await handle("generate_report", {"testUrl": "https://b.example", "sessionId": "b"})
        assert exc_info.value.code == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_full_report(self, handle, tmp_path: Path) -> None:
        out = tmp_path / "custom"
        text = await handle(
            "analyze_url_full_report",
            {"url": "https://example.com", "appName": "Demo", "outputPath": str(out), "fullPage": True},
        )
        report_dir = next(out.iterdir())
        assert text.startswith(f"Report generated in {report_dir}")
        data_file = next(report_dir.glob("report_data_*.json"))
        assert json.loads(data_file.read_text())["title"] == "UI/UX Analysis Report: Demo"

    @pytest.mark.asyncio
    async def test_invalid_url(self, handle) -> None:
        with pytest.raises(ToolCallError) as exc_info:
            await handle("screenshot_url", {"url": "nope"})
        assert exc_info.value.code == INVALID_PARAMS

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name, args",
        [
            ("screenshot_url", {"url": 123}),
            ("analyze_url_full_report", {"url": None}),
            ("generate_report", {"testUrl": ["x"]}),
            ("generate_report", {"testUrl": "https://example.com", "outputPath": 5}),
            ("analyze_screen", {"sessionId": ["a"]}),
        ],
    )
    async def test_non_string_arguments_rejected(self, handle, name: str, args: dict) -> None:
        with pytest.raises(ToolCallError) as exc_info:
            await handle(name, args)
        assert exc_info.value.code == INVALID_PARAMS
        assert "string" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_invalid_capture_options(self, handle, dry_browser: DryRunBrowser) -> None:
        with pytest.raises(ToolCallError) as exc_info:
            await handle("screenshot_url", {"url": "https://example.com", "waitTime": -5})
        assert exc_info.value.code == INVALID_PARAMS
        assert dry_browser.captured == []

    @pytest.mark.asyncio
    async def test_stage_failure_is_internal_error(self, config: DebugConfig, dry_browser: DryRunBrowser) -> None:
        vision = AsyncMock()
        vision.analyze_image.side_effect = RuntimeError("quota exhausted")
        handle = make_tool_handler(DebugPipeline(config, dry_browser, vision), SessionStore())
        await handle("screenshot_url", {"url": "https://example.com"})

        with pytest.raises(ToolCallError) as exc_info:
            await handle("analyze_screen", None)
        assert exc_info.value.code == INTERNAL_ERROR
        assert "quota exhausted" in exc_info.value.message


class TestFileTools:
    @pytest.mark.asyncio
    async def test_read_file(self, handle, tmp_path: Path) -> None:
        target = tmp_path / "notes.txt"
        target.write_text("one\ntwo\nthree\nfour")
        text = await handle("read_file", {"path": str(target), "startLine": 2, "endLine": 3})
        assert text == "two\nthree"

    @pytest.mark.asyncio
    async def test_modify_file(self, handle, tmp_path: Path) -> None:
        target = tmp_path / "notes.txt"
        target.write_text("one\ntwo\nthree")
        text = await handle(
            "modify_file", {"path": str(target), "startLine": 2, "endLine": 2, "content": "TWO\n2b"}
        )
        assert text.startswith("Successfully modified")
        assert target.read_text() == "one\nTWO\n2b\nthree"

    @pytest.mark.asyncio
    async def test_missing_arguments(self, handle) -> None:
        with pytest.raises(ToolCallError) as exc_info:
            await handle("read_file", {"path": "x"})
        assert exc_info.value.code == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_modify_requires_content(self, handle, tmp_path: Path) -> None:
        target = tmp_path / "notes.txt"
        target.write_text("one")
        with pytest.raises(ToolCallError, match="content"):
            await handle("modify_file", {"path": str(target), "startLine": 1, "endLine": 1})

    @pytest.mark.asyncio
    async def test_missing_file(self, handle, tmp_path: Path) -> None:
        with pytest.raises(ToolCallError) as exc_info:
            await handle("read_file", {"path": str(tmp_path / "nope"), "startLine": 1, "endLine": 2})
        assert exc_info.value.code == INVALID_PARAMS

    @pytest.mark.asyncio
    async def test_reversed_range(self, handle, tmp_path: Path) -> None:
        target = tmp_path / "notes.txt"
        target.write_text("one\ntwo")
        with pytest.raises(ToolCallError) as exc_info:
            await handle("read_file", {"path": str(target), "startLine": 2, "endLine": 1})
        assert exc_info.value.code == INVALID_PARAMS
