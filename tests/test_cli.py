"""Tests for the Typer CLI in dry-run mode."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from avd.cli import app

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "avd-config.yml"
    path.write_text(
        f'temp_directory: "{tmp_path / "tmp"}"\n'
        f'output_directory: "{tmp_path / "reports"}"\n'
        f'reference_screenshot: "{tmp_path / "reference.png"}"\n'
    )
    return path


class TestCli:
    def test_validate(self, config_file: Path) -> None:
        result = runner.invoke(app, ["validate", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Config is valid" in result.output

    def test_validate_bad_config(self, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yml"
        bad.write_text("temperature: 9\n")
        result = runner.invoke(app, ["validate", "--config", str(bad)])
        assert result.exit_code == 1

    def test_tools(self) -> None:
        result = runner.invoke(app, ["tools"])
        assert result.exit_code == 0
        assert "screenshot_url" in result.output

    def test_full_dry_run(self, config_file: Path, tmp_path: Path) -> None:
        result = runner.invoke(
            app,
            ["full", "https://example.com", "--config", str(config_file), "--dry-run", "--app-name", "Demo"],
        )
        assert result.exit_code == 0, result.output

        report_dir = next((tmp_path / "reports").iterdir())
        data = json.loads(next(report_dir.glob("report_data_*.json")).read_text())
        assert data["title"] == "UI/UX Analysis Report: Demo"
        assert data["elementCount"] == 3

    def test_full_invalid_url(self, config_file: Path) -> None:
        result = runner.invoke(app, ["full", "ftp://example.com", "--config", str(config_file), "--dry-run"])
        assert result.exit_code == 1
        assert "Invalid input" in result.output

    def test_analyze_without_screenshot(self, config_file: Path) -> None:
        result = runner.invoke(app, ["analyze", "--config", str(config_file), "--dry-run"])
        assert result.exit_code == 1

    def test_analyze_json(self, config_file: Path, tmp_path: Path) -> None:
        shot = tmp_path / "reference.png"
        shot.write_bytes(b"png")
        result = runner.invoke(app, ["analyze", "--config", str(config_file), "--dry-run", "--json"])
        assert result.exit_code == 0, result.output
        assert '"elements"' in result.output
