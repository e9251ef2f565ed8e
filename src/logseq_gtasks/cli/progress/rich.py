"""Rich live display for ``logseq-gtasks sync``."""

from __future__ import annotations

from collections.abc import Mapping
from types import TracebackType
from typing import ClassVar

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.progress import TaskID as RichTaskID
from rich.text import Text

from logseq_gtasks.engine.progress import SyncPhase, SyncProgress
from logseq_gtasks.models.sync import Classification


def format_plan(counts: Mapping[Classification, int]) -> str:
    """``"2 new, 1 local-changed, 5 unchanged"``; classifications with no task are left out."""
    parts = [f"{counts[c]} {c.value}" for c in Classification if counts.get(c)]
    return ", ".join(parts) if parts else "no tasks"


class RichSyncProgress(SyncProgress):
    """One bar per phase on stderr, each showing the page or task last written.

    Bars count tasks, so a Create batch of three tasks on one journal page
    advances its bar by three::

        with RichSyncProgress() as progress:
            result = await TaskSync(config, progress=progress).sync()
    """

    _PHASE_LABELS: ClassVar[dict[SyncPhase, str]] = {
        SyncPhase.FETCH: "[cyan]Fetch[/]",
        SyncPhase.INDEX: "[blue]Index[/]",
        SyncPhase.CREATE: "[green]Create[/]",
        SyncPhase.UPDATE: "[yellow]Update[/]",
        SyncPhase.PUSH: "[magenta]Push[/]",
    }

    def __init__(self, console: Console | None = None) -> None:
        self._progress = Progress(
            SpinnerColumn(finished_text="[green]✓[/green]"),
            TextColumn("{task.description:>14}"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            TextColumn("[dim]{task.fields[current]}"),
            console=console or Console(stderr=True),
            transient=False,
        )
        self._task_ids: dict[SyncPhase, RichTaskID] = {}

    def __enter__(self) -> RichSyncProgress:
        self._progress.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self._progress.stop()

    def phase_start(self, phase: SyncPhase, total: int | None = None) -> None:
        self._task_ids[phase] = self._progress.add_task(self._PHASE_LABELS[phase], total=total, current="")

    def plan_ready(self, counts: Mapping[Classification, int]) -> None:
        self._progress.console.print(Text(f"{'Plan':>14}  {format_plan(counts)}"))

    def item_done(self, phase: SyncPhase, *, label: str = "", count: int = 1) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        self._progress.update(task_id, advance=count, current=label)

    def phase_done(self, phase: SyncPhase) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        task = self._progress.tasks[task_id]
        if task.total is None:
            self._progress.update(task_id, total=1, completed=1, current="")
        else:
            self._progress.update(task_id, completed=task.total, current="")

    def phase_error(self, phase: SyncPhase, error: BaseException) -> None:
        task_id = self._task_ids.get(phase)
        if task_id is None:
            return
        self._progress.update(task_id, description=f"[red]✗[/red] {phase.value:>10}", current=str(error)[:60])
