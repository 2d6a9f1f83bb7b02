"""Console rendering and progress helpers for the batch-upload CLI."""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table

from .models import UploadCandidate, UploadedFile
from .orchestrator.models import RunResult
from .services.validator import format_file_size


console = Console()
err_console = Console(stderr=True)


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    panel = Panel(
        table,
        title="[bold green]batch-upload[/bold green]",
        subtitle="[dim]batch_uploader CLI[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_uploaded_files(files: Sequence[UploadedFile]) -> None:
    """Render a table of uploaded file descriptors."""
    table = Table(title="Uploaded files", show_lines=False)
    table.add_column("ID", style="dim")
    table.add_column("Filename", style="bold")
    table.add_column("Type")
    table.add_column("Size", justify="right")

    for item in files:
        table.add_row(
            item.id,
            escape(item.original_filename),
            item.mime_type or "-",
            format_file_size(item.file_size),
        )
    console.print(table)


class BatchUploadProgressDisplay:
    """
    Hook-driven console display for one upload run.

    Pass ``on_progress``, ``on_success`` and ``on_error`` as the
    UploadOptions hooks.
    """

    def __init__(self, candidates: Sequence[UploadCandidate], batch_size: int):
        self._total_files = len(candidates)
        self._total_bytes = sum(c.size for c in candidates)
        self._batch_size = batch_size
        self._errors: List[str] = []
        self._uploaded: List[UploadedFile] = []
        self._task_id: Optional[TaskID] = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            console=console,
            transient=True,
        )

    def start(self) -> None:
        if self._task_id is not None:
            return
        console.print(
            f"[cyan]Uploading:[/cyan] {self._total_files} file(s), "
            f"{format_file_size(self._total_bytes)}, batches of {self._batch_size}"
        )
        self._progress.start()
        self._task_id = self._progress.add_task("upload", label="batches", total=100)

    def stop(self) -> None:
        if self._task_id is not None:
            self._progress.stop()
            self._task_id = None

    def on_progress(self, percent: int) -> None:
        if self._task_id is None:
            self.start()
        self._progress.update(self._task_id, completed=percent)

    def on_success(self, files: List[UploadedFile]) -> None:
        self._uploaded = list(files)

    def on_error(self, message: str) -> None:
        self._errors.append(message)

    @property
    def errors(self) -> List[str]:
        return list(self._errors)

    def finish(self, result: RunResult) -> None:
        """Stop the bar and print the outcome."""
        self.stop()

        if self._uploaded:
            render_uploaded_files(self._uploaded)

        for issue in result.issues:
            err_console.print(f"[red]{issue.kind.value}:[/red] {escape(issue.message)}", soft_wrap=True)

        summary = (
            f"{len(result.files)}/{self._total_files} uploaded, "
            f"{result.batches_completed}/{result.batches_total} batch(es)"
        )
        if result.success:
            console.print(f"[green]Done ({result.outcome.value}):[/green] {summary}")
        else:
            err_console.print(f"[red]Failed ({result.outcome.value}):[/red] {summary}")
