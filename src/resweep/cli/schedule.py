# Copyright (c) Syntropy Systems
"""resweep schedule command."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from resweep.config import load_config
from resweep.errors import ResweepError
from resweep.schedule import expand

console = Console()


def schedule(
    config_file: Path = typer.Argument(
        ...,
        help="Path to the run configuration YAML file",
        exists=True,
        dir_okay=False,
    ),
    nsweeps: Optional[int] = typer.Option(
        None,
        "--nsweeps", "-n",
        help="Override the number of sweeps from the config",
    ),
) -> None:
    """Preview the per-sweep budget schedule without running anything."""
    try:
        loaded = load_config(config_file)
        spec = loaded.config.sweeps.budget
        count = loaded.config.sweeps.nsweeps if nsweeps is None else nsweeps
        budgets = expand(spec, count)
    except ResweepError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if not budgets:
        console.print("[yellow]Empty schedule (nsweeps = 0)[/yellow]")
        return

    table = Table(title=f"Schedule: {spec.kind}")
    table.add_column("Sweep", style="dim")
    table.add_column("Budget", justify="right")

    for sweep, budget in enumerate(budgets, start=1):
        table.add_row(str(sweep), str(budget))

    console.print(table)
    console.print(f"\n[bold]{len(budgets)} sweeps[/bold], peak budget {max(budgets)}")
