from __future__ import annotations

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from mcp_doctor.application.registry import build_default_registry


def register(app: typer.Typer, *, stdout_console: Console) -> None:
    @app.command(help="List the probe categories and the probes each one runs.")
    def categories() -> None:
        registry = build_default_registry()
        table = Table(title="Probe categories", box=box.SIMPLE_HEAVY)
        table.add_column("Category", style="cyan")
        table.add_column("Probe", style="magenta")
        table.add_column("Severity", style="green")
        for category in registry.available_categories():
            for test in registry.get_by_category(category):
                table.add_row(category, test.name, test.severity.value)
        stdout_console.print(table)


__all__ = ["register"]
