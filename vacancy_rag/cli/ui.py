# vacancy_rag/cli/ui.py
"""
Shared UI helpers for CLI commands.

Usage:
    from vacancy_rag.cli.ui import ui, console

    ui.header("Ingest", "units.csv")
    ui.success("Done!")
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

console = Console()


class UI:
    """Consistent styling for command output."""

    def print(self, msg: str, style: str = "") -> None:
        if style:
            console.print(f"[{style}]{msg}[/{style}]")
        else:
            console.print(msg)

    def header(self, title: str, subtitle: str = "") -> None:
        content = f"[bold]{title}[/bold]"
        if subtitle:
            content += f"\n[dim]{subtitle}[/dim]"
        console.print(Panel.fit(content, border_style="blue"))

    def section(self, title: str) -> None:
        console.print(f"\n[bold cyan]{title}[/bold cyan]")

    def success(self, msg: str) -> None:
        console.print(f"[green]✓[/green] {msg}")

    def error(self, msg: str) -> None:
        console.print(f"[red]✗[/red] {msg}")

    def warning(self, msg: str) -> None:
        console.print(f"[yellow]⚠[/yellow] {msg}")

    def info(self, msg: str) -> None:
        console.print(f"[dim]{msg}[/dim]")

    def status(self, name: str, ok: bool, detail: str = "") -> None:
        icon, color = ("✓", "green") if ok else ("✗", "red")
        detail_str = f" [dim]{detail}[/dim]" if detail else ""
        console.print(f"  [{color}]{icon}[/{color}] {name}{detail_str}")

    def summary_panel(self, content: str, title: str = "", style: str = "green") -> None:
        console.print(Panel(content, title=title, border_style=style))

    def markdown(self, text: str) -> None:
        console.print(Markdown(text))

    def table(
        self,
        columns: Sequence[str],
        rows: Iterable[Sequence[object]],
        title: Optional[str] = None,
    ) -> None:
        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*("" if v is None else str(v) for v in row))
        console.print(table)


ui = UI()

__all__ = ["ui", "console", "UI"]
