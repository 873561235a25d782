"""Rich-based console adapter used for all TTY output."""

from __future__ import annotations

import shutil
import sys
from typing import IO, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

THEME = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "red",
        "success": "green",
        "accent": "#3ea6ff",
    }
)


class ConsoleUIAdapter:
    """ANSI-friendly output with Rich tables and panels."""

    def __init__(self, stream: IO[str] | None = None):
        self.console = Console(
            theme=THEME,
            file=stream or sys.stdout,
            highlight=False,
            soft_wrap=True,
        )

    def show_topic(self, message: str) -> None:
        self.console.print(Text.assemble(("===> ", "accent"), (message, "bold")))

    def show_info(self, message: str) -> None:
        self.console.print(Text(f"     {message}", style="info"))

    def show_warning(self, message: str) -> None:
        self.console.print(Text(f"     {message}", style="warning"))

    def show_error(self, message: str) -> None:
        self.console.print(Text(f"     {message}", style="error"))

    def show_success(self, message: str) -> None:
        self.console.print(Text(f"     {message}", style="success"))

    def show_table(self, title: str, columns: Sequence[str], rows: list[Sequence[str]]) -> None:
        # Keep tables within the visible console width and fold long cells.
        term_width = 0
        try:
            term_width = self.console.size.width
        except Exception:
            pass

        if not term_width:
            term_width = shutil.get_terminal_size(fallback=(100, 24)).columns

        table = Table(
            title=f"[b]{title}[/b]",
            border_style="accent",
            header_style="bold white",
            row_styles=("", "dim"),
            width=max(60, term_width - 2),
        )
        for column in columns:
            table.add_column(column, overflow="fold")
        for row in rows:
            table.add_row(*(Text(str(cell)) for cell in row))
        self.console.print(table)

    def show_output(self, shard_id: str, stdout: str, stderr: str) -> None:
        self.console.print(
            Panel(Text(stdout or "(empty)"), title=f"Run {shard_id} stdout", border_style="accent")
        )
        self.console.print(
            Panel(Text(stderr or "(empty)"), title=f"Run {shard_id} stderr", border_style="error")
        )
