"""Configuration schema — validates avd-config.yml."""

from pathlib import Path

from pydantic import BaseModel, field_validator

_DEFAULT_TEMP_DIR = str(Path.home() / ".cache" / "ai-vision-debug")
_DEFAULT_REFERENCE = str(Path.home() / "Downloads" / "test_screenshot.png")


class DebugConfig(BaseModel):
    """Runtime settings for the capture → analyze → report pipeline.

    Every field has a default, so an empty YAML file (or no file at all)
    yields a usable configuration.
    """

    # Vision model
    model: str = "gpt-4o"
    max_tokens: int = 4_096
    temperature: float = 0.1
    rate_limit_retries: int = 3

    # Where screenshots and reports go
    temp_directory: str = _DEFAULT_TEMP_DIR
    output_directory: str = "./reports"

    # Used by analyze when the session has no screenshot of its own
    reference_screenshot: str = _DEFAULT_REFERENCE

    # Browser
    viewport_width: int = 1280
    viewport_height: int = 800
    navigation_timeout_ms: int = 30_000
    selector_timeout_ms: int = 10_000

    @field_validator(
        "max_tokens",
        "viewport_width",
        "viewport_height",
        "navigation_timeout_ms",
        "selector_timeout_ms",
    )
    @classmethod
    def check_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("rate_limit_retries")
    @classmethod
    def check_retries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("rate_limit_retries must be at least 1")
        return v

    @field_validator("temperature")
    @classmethod
    def check_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("temperature must be between 0 and 2")
        return v
