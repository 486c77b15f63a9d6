"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from avd.pipeline.orchestrator import DebugPipeline
from avd.schemas.config import DebugConfig
from avd.shared.browser import DryRunBrowser
from avd.shared.vision_client import DRY_RUN_RESPONSE, DryRunVisionClient, VisionClient

SAMPLE_RESPONSE = """\
Sure! Here is my analysis.

--- Description Start ---
  A dashboard with a sidebar and a data table.
--- Description End ---

--- Element Start ---
id: 1
type: Button
label: "Save"
textContent: Save
geometry: { x: 10, y: 20, width: ~100, height: 40px }
typography: { fontFamily: "Inter, sans-serif", fontSize: "14px", fontWeight: "bold", color: "#ffffff" }
appearance: { backgroundColor: "#000000", borderColor: null, borderWidth: 1, borderRadius: 4 }
state: disabled
description: Saves the form.
--- Element End ---

--- Element Start ---
id: 2
type: Text
label: null
geometry: { x: 0, y: 0, width: 300, height: 20 }
typography: { fontSize: 12, color: "#333333" }
appearance: { backgroundColor: null, borderColor: null }
--- Element End ---

--- Element Start ---
id: not-a-number
type: Link
--- Element End ---

--- Color Palette Start ---
Backgrounds: "#000000", [#1e1e1e]
TextColors: #ffffff, null, , #333333
AccentColors: rgb(37, 99, 235)
--- Color Palette End ---

--- Typography Start ---
- { fontFamily: Inter, fontSize: 14, fontWeight: bold }
- { fontFamily: Inter, fontSize: 12px, fontWeight: normal }
not a style line
--- Typography End ---

--- Visual Audit Start ---
- Orphan Metric: { assessment: "good", details: "before any header" }
Accessibility
- Text Contrast: { assessment: "poor", details: "Gray on white in the table" }
Layout:
- Visual Hierarchy: { assessment: "good", details: null }
--- Visual Audit End ---
"""


@pytest.fixture
def sample_response() -> str:
    return SAMPLE_RESPONSE


@pytest.fixture
def config(tmp_path: Path) -> DebugConfig:
    """Config whose directories all live under tmp_path."""
    reference = tmp_path / "reference.png"
    return DebugConfig(
        temp_directory=str(tmp_path / "tmp"),
        output_directory=str(tmp_path / "reports"),
        reference_screenshot=str(reference),
    )


@pytest.fixture
def dry_browser() -> DryRunBrowser:
    return DryRunBrowser()


@pytest.fixture
def dry_vision() -> DryRunVisionClient:
    return DryRunVisionClient(DRY_RUN_RESPONSE)


@pytest.fixture
def pipeline(config: DebugConfig, dry_browser: DryRunBrowser, dry_vision: DryRunVisionClient) -> DebugPipeline:
    return DebugPipeline(config, dry_browser, dry_vision)


@pytest.fixture
def mock_vision_client(config: DebugConfig) -> VisionClient:
    """Return a VisionClient with a mocked OpenAI SDK underneath."""
    client = VisionClient.__new__(VisionClient)
    client.config = config
    client._client = AsyncMock()
    return client
