"""Rich progress display for the capture → analyze → report stages."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

console = Console()


class StageProgress:
    """A titled block with one spinner line per stage.

    Usage::

        with StageProgress("Analyzing https://example.com") as progress:
            with progress.stage("Capture") as info:
                info["detail"] = await pipeline.capture(...)

    A stage that raises is marked failed and the exception propagates.
    """

    def __init__(self, title: str) -> None:
        self.title = title
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=console,
        )

    def __enter__(self) -> "StageProgress":
        console.rule(f"[bold blue]{self.title}")
        self._progress.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._progress.stop()

    @contextmanager
    def stage(self, name: str) -> Iterator[dict[str, str]]:
        """Track one stage; set ``info["detail"]`` to show it on success."""
        task = self._progress.add_task(f"[cyan]{name}...[/]", total=1)
        info: dict[str, str] = {}
        try:
            yield info
        except Exception as exc:
            self._progress.update(task, description=f"[red]✗ {name}: {exc}[/]", completed=1)
            raise
        detail = f" ({info['detail']})" if info.get("detail") else ""
        self._progress.update(task, description=f"[green]✓ {name}[/]{detail}", completed=1)
