"""Typer CLI — ``avd full``, ``avd capture``, ``avd analyze``, ``avd tools`` and ``avd validate``."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from avd.config import load_config
from avd.pipeline.errors import InputError, StageError
from avd.schemas.config import DebugConfig
from avd.schemas.session import CaptureOptions

# Load .env file from project root (if it exists)
load_dotenv()

app = typer.Typer(
    name="avd",
    help="AI Vision Debug — screenshot a page, analyze its UI with a vision model, and write a report.",
    no_args_is_help=True,
)
console = Console()

ConfigOption = typer.Option(None, "--config", "-c", help="Path to avd-config.yml (defaults apply when omitted).")
VerboseOption = typer.Option(False, "--verbose", "-v")
DryRunOption = typer.Option(False, "--dry-run", help="Use a placeholder browser and canned model output (no API calls).")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _load(config: Path | None) -> DebugConfig:
    try:
        return load_config(config)
    except Exception as exc:
        console.print(f"[red]Config validation failed:[/] {exc}")
        raise typer.Exit(code=1)


def _make_collaborators(cfg: DebugConfig, dry_run: bool):
    if dry_run:
        from avd.shared.browser import DryRunBrowser
        from avd.shared.vision_client import DryRunVisionClient
        return DryRunBrowser(), DryRunVisionClient()

    from avd.shared.browser import BrowserManager
    from avd.shared.vision_client import VisionClient
    return BrowserManager(cfg), VisionClient(cfg)


def _run(coro) -> None:
    """Run a pipeline coroutine, turning pipeline errors into a clean exit."""
    try:
        asyncio.run(coro)
    except InputError as exc:
        console.print(f"[red]Invalid input:[/] {exc}")
        raise typer.Exit(code=1)
    except StageError as exc:
        console.print(f"[red]{exc.stage.capitalize()} stage failed:[/] {exc.cause}")
        raise typer.Exit(code=1)


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="Path to avd-config.yml"),
    verbose: bool = VerboseOption,
) -> None:
    """Validate a configuration file."""
    _setup_logging(verbose)
    cfg = _load(config)

    console.print("[green]Config is valid![/]\n")
    console.print(f"  Model:          {cfg.model}")
    console.print(f"  Output dir:     {cfg.output_directory}")
    console.print(f"  Temp dir:       {cfg.temp_directory}")
    console.print(f"  Reference shot: {cfg.reference_screenshot}")
    console.print(f"  Viewport:       {cfg.viewport_width}x{cfg.viewport_height}")


@app.command()
def tools() -> None:
    """List the tools exposed to the tool-call protocol layer."""
    from avd.tools import TOOLS

    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Description")
    for tool in TOOLS:
        schema = tool["input_schema"]
        table.add_row(tool["name"], ", ".join(schema.get("required", [])) or "—", tool["description"])
    console.print(table)


@app.command()
def capture(
    url: str = typer.Argument(..., help="Page to screenshot."),
    full_page: bool = typer.Option(False, "--full-page", help="Capture the full scrollable page."),
    wait_for_selector: str = typer.Option(None, "--wait-for-selector", help="CSS selector to wait for."),
    wait_time: int = typer.Option(None, "--wait-time", help="Extra milliseconds to wait."),
    config: Path = ConfigOption,
    verbose: bool = VerboseOption,
    dry_run: bool = DryRunOption,
) -> None:
    """Take a screenshot of a URL."""
    _setup_logging(verbose)
    cfg = _load(config)
    options = CaptureOptions(full_page=full_page, wait_for_selector=wait_for_selector, wait_time=wait_time)
    _run(_run_capture(cfg, url, options, dry_run=dry_run))


async def _run_capture(cfg: DebugConfig, url: str, options: CaptureOptions, *, dry_run: bool) -> None:
    from avd.pipeline.orchestrator import DebugPipeline
    from avd.schemas.session import DebugSession

    browser, vision = _make_collaborators(cfg, dry_run)
    async with browser:
        pipeline = DebugPipeline(cfg, browser, vision)
        path = await pipeline.capture(DebugSession(), url, options)
    console.print(f"[green]Screenshot saved to:[/] {path}")


@app.command()
def analyze(
    screenshot: Path = typer.Option(None, "--screenshot", "-s", help="Image to analyze (defaults to the reference screenshot)."),
    as_json: bool = typer.Option(False, "--json", help="Print the parsed analysis as JSON."),
    config: Path = ConfigOption,
    verbose: bool = VerboseOption,
    dry_run: bool = DryRunOption,
) -> None:
    """Analyze an existing screenshot and print the extracted UI elements."""
    _setup_logging(verbose)
    cfg = _load(config)
    _run(_run_analyze(cfg, screenshot, as_json=as_json, dry_run=dry_run))


async def _run_analyze(cfg: DebugConfig, screenshot: Path | None, *, as_json: bool, dry_run: bool) -> None:
    from avd.pipeline.orchestrator import DebugPipeline
    from avd.schemas.session import DebugSession

    session = DebugSession()
    if screenshot is not None:
        session.last_screenshot_path = str(screenshot)

    browser, vision = _make_collaborators(cfg, dry_run)
    async with browser:
        result = await DebugPipeline(cfg, browser, vision).analyze(session)

    if as_json:
        console.print_json(result.model_dump_json(by_alias=True, exclude_none=True))
        return

    console.print(f"[bold]Description:[/] {result.description}\n")
    table = Table(title=f"{len(result.elements)} UI elements")
    for column in ("#", "Type", "Label", "x", "y", "w", "h", "State"):
        table.add_column(column)
    for el in result.elements:
        g = el.geometry
        table.add_row(
            str(el.id), el.type, el.label or "",
            *(str(v) if v is not None else "" for v in (g.x, g.y, g.width, g.height)),
            el.state,
        )
    console.print(table)


@app.command()
def full(
    url: str = typer.Argument(..., help="Page to analyze."),
    app_name: str = typer.Option(None, "--app-name", "-n", help="Application name used in the report title."),
    output: Path = typer.Option(None, "--output", "-o", help="Directory under which the report folder is created."),
    full_page: bool = typer.Option(False, "--full-page", help="Capture the full scrollable page."),
    wait_for_selector: str = typer.Option(None, "--wait-for-selector", help="CSS selector to wait for."),
    wait_time: int = typer.Option(None, "--wait-time", help="Extra milliseconds to wait."),
    config: Path = ConfigOption,
    verbose: bool = VerboseOption,
    dry_run: bool = DryRunOption,
) -> None:
    """Screenshot a URL, analyze it and write the report bundle."""
    _setup_logging(verbose)
    cfg = _load(config)
    options = CaptureOptions(full_page=full_page, wait_for_selector=wait_for_selector, wait_time=wait_time)

    if dry_run:
        console.print("[yellow]DRY-RUN mode — no browser or API calls will be made.[/]\n")

    _run(_run_full(
        cfg, url, options,
        app_name=app_name,
        output=str(output) if output else None,
        dry_run=dry_run,
    ))


async def _run_full(
    cfg: DebugConfig,
    url: str,
    options: CaptureOptions,
    *,
    app_name: str | None,
    output: str | None,
    dry_run: bool,
) -> None:
    """Run the three stages with a progress line for each."""
    from avd.pipeline.orchestrator import DebugPipeline
    from avd.schemas.session import DebugSession
    from avd.shared.progress import StageProgress

    session = DebugSession()
    browser, vision = _make_collaborators(cfg, dry_run)

    async with browser:
        pipeline = DebugPipeline(cfg, browser, vision)
        with StageProgress(f"Analyzing {url}") as progress:
            with progress.stage("Capture") as info:
                info["detail"] = await pipeline.capture(session, url, options)

            with progress.stage("Analyze") as info:
                result = await pipeline.analyze(session)
                info["detail"] = f"{len(result.elements)} elements"

            with progress.stage("Report"):
                bundle = await pipeline.report(session, url, app_name=app_name, output_path=output)

    console.print(f"\n[green]Report data written to:[/] {bundle.data_file}")
    if bundle.markdown_file:
        console.print(f"[green]Markdown report written to:[/] {bundle.markdown_file}")
    if bundle.screenshot_file:
        console.print(f"[green]Screenshot copied to:[/] {bundle.screenshot_file}")
    else:
        console.print("[yellow]Screenshot could not be copied into the report folder.[/]")
