"""Session state and step-result models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from avd.schemas.elements import AnalysisResult, UIElement


class CaptureOptions(BaseModel):
    """Browser options for a single screenshot."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    full_page: bool = False
    wait_for_selector: str | None = None
    wait_time: int | None = Field(default=None, ge=0)  # milliseconds


class DebugSession(BaseModel):
    """Tracks the latest screenshot and analysis across sequential steps."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str = "default"
    current_url: str | None = None
    last_screenshot_path: str | None = None
    debug_history: list[str] = []
    elements: list[UIElement] = []
    last_analysis_result: AnalysisResult | None = None

    def record(self, entry: str) -> None:
        self.debug_history.append(entry)


class ReportBundle(BaseModel):
    """Paths written by the report step."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    report_dir: str
    data_file: str
    markdown_file: str | None = None
    screenshot_file: str | None = None
