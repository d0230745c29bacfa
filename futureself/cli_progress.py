"""Console rendering of the plugin panel for the futureself CLI."""
from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn
from rich.table import Table

from .models import SelectOption, TaskState, UploadTask

console = Console()

STATE_LABELS = {
    TaskState.IDLE: "Waiting",
    TaskState.COMPRESSING: "Compressing image",
    TaskState.AWAITING_URL: "Requesting upload URL",
    TaskState.UPLOADING: "Uploading image",
    TaskState.POLLING: "Drawing your future... Please wait a moment...",
    TaskState.SUCCEEDED: "Done",
    TaskState.FAILED: "Failed",
    TaskState.CANCELED: "Canceled",
}


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
        title="[bold green]futureself[/bold green]",
        subtitle="[dim]future self panel[/dim]",
        border_style="blue",
    )
    console.print(panel)


def render_options(title: str, options: Sequence[SelectOption]) -> None:
    table = Table(title=title, show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Option", style="bold")
    for option in options:
        table.add_row(str(option.index), option.label)
    console.print(table)


class ConsolePanel:
    """
    Event-based console display for one task.

    Subscribe it to an orchestrator with ``attach``; it shows the progress
    bar, alerts and the transient cancel notice.
    """

    def __init__(self, console_: Optional[Console] = None):
        self._console = console_ or console
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold cyan]{task.fields[label]}", justify="left"),
            BarColumn(bar_width=42),
            TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
            expand=False,
            console=self._console,
        )
        self._task_id: Optional[TaskID] = None
        self._started = False
        self.alerts: list[str] = []

    def attach(self, orchestrator) -> "ConsolePanel":
        orchestrator.on("state", self.on_state)
        orchestrator.on("progress", self.on_progress)
        orchestrator.on("alert", self.on_alert)
        orchestrator.on("notice", self.on_notice)
        orchestrator.on("succeeded", self.on_succeeded)
        return self

    def start(self) -> None:
        if self._started:
            return
        self._progress.start()
        self._task_id = self._progress.add_task("task", label=STATE_LABELS[TaskState.IDLE], total=100)
        self._started = True

    def stop(self) -> None:
        if self._started:
            self._progress.stop()
            self._started = False

    def on_state(self, task: UploadTask) -> None:
        if not self._started:
            self.start()
        self._progress.update(self._task_id, label=STATE_LABELS[task.state])
        if task.state.is_terminal:
            self.stop()

    def on_progress(self, task: UploadTask) -> None:
        if self._started:
            self._progress.update(self._task_id, completed=task.progress)

    def on_alert(self, message: str) -> None:
        self.alerts.append(message)
        self._console.print(f"[bold red]{message}[/bold red]")

    def on_notice(self, message: str) -> None:
        self._console.print(f"[blue]{message}[/blue]")

    def on_succeeded(self, task: UploadTask) -> None:
        url = task.result.url if task.result else "-"
        self._console.print(f"[green]Your future self is ready:[/green] {url}")
