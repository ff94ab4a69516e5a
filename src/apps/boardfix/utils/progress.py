"""Progress reporting for commands that walk many cards."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

__all__ = ["card_progress", "CardProgress"]


@dataclass
class CardProgress:
    """Handle advanced once per processed card."""

    _progress: Progress
    _task_id: TaskID
    _console: Console
    _total: int
    processed: int = 0
    _done: bool = False

    def advance(self, step: int = 1) -> None:
        self.processed += step
        self._progress.update(
            self._task_id,
            description=f"Checked {self.processed}/{self._total} cards",
        )
        self._progress.advance(self._task_id, step)

    def finish(self, message: str, *, failed: bool = False) -> None:
        if self._done:
            return
        self._done = True
        if failed:
            self._console.print(f"[bold red]✖ {message}[/bold red]")
        else:
            self._console.print(f"[bold green]✔ {message}[/bold green]")


@contextmanager
def card_progress(
    title: str,
    *,
    total: int,
    console: Optional[Console] = None,
) -> Iterator[CardProgress]:
    """Yield a :class:`CardProgress` rendered under a titled rule."""

    progress_console = console or Console()
    progress_console.rule(f"[bold cyan]{title}")

    with Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=None),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=progress_console,
        transient=False,
    ) as progress:
        task_id = progress.add_task("Repairing content order", total=max(total, 1))
        handle = CardProgress(progress, task_id, progress_console, total)
        try:
            yield handle
        except Exception:
            handle.finish(f"{title} failed after {handle.processed} card(s).", failed=True)
            raise
        finally:
            handle.finish(f"{title} completed.")
