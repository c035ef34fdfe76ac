# Copyright (c) Syntropy Systems
"""resweep inspect and history commands."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from resweep.checkpoint import CheckpointReadError, read_checkpoint
from resweep.config import load_config
from resweep.errors import ResweepError
from resweep.fingerprint import config_fingerprint
from resweep.history import read_history

console = Console()


def inspect_checkpoint(
    checkpoint: Path = typer.Argument(
        ...,
        help="Path to a checkpoint file",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Run configuration to check the checkpoint fingerprint against",
        exists=True,
        dir_okay=False,
    ),
) -> None:
    """Show what a checkpoint holds and whether it matches a configuration."""
    record = read_checkpoint(checkpoint)
    if record is CheckpointReadError.NOT_FOUND:
        console.print(f"[red]Error:[/red] Checkpoint not found: {checkpoint}")
        raise typer.Exit(1)
    if isinstance(record, CheckpointReadError):
        console.print(f"[red]Error:[/red] Checkpoint is unreadable: {checkpoint}")
        raise typer.Exit(1)

    meta = record.meta
    conserved = sum(1 for site in meta.structure if site.conserved)

    console.print(f"\n[bold]Checkpoint {checkpoint}[/bold]")
    console.print(f"  [dim]objective:[/dim] {record.objective:.12g}")
    console.print(f"  [dim]sweep:[/dim] {record.sweep}")
    console.print(f"  [dim]fingerprint:[/dim] {record.fingerprint or '-'}")
    console.print(
        f"  [dim]sites:[/dim] {len(meta.structure)} ({conserved} conserved)"
    )
    console.print(f"  [dim]auxiliary:[/dim] {'yes' if meta.has_auxiliary else 'no'}")
    console.print(f"  [dim]created:[/dim] {meta.created_at}")
    console.print(f"  [dim]run by:[/dim] {meta.run_by or '-'}")

    if config_file is None:
        console.print()
        return

    try:
        loaded = load_config(config_file)
    except ResweepError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from e

    current = config_fingerprint(loaded.config)
    if record.fingerprint == current:
        console.print("  [green]✓[/green] fingerprint matches configuration")
    else:
        console.print("  [yellow]⚠[/yellow] fingerprint does not match configuration")
    console.print()


def history(
    history_file: Path = typer.Argument(
        ...,
        help="Path to a history.jsonl file",
    ),
    last: int = typer.Option(
        20,
        "--last", "-n",
        help="Number of sweeps to show",
    ),
) -> None:
    """Show the most recent sweeps recorded in a history file."""
    records = read_history(history_file)
    if not records:
        console.print("[dim]No sweeps recorded[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Sweep", style="dim")
    table.add_column("Budget", justify="right")
    table.add_column("Objective", justify="right")
    table.add_column("Local error", justify="right")
    table.add_column("Streak", justify="right")

    for rec in records[-last:]:
        error = "-" if rec.local_error is None else f"{rec.local_error:.3e}"
        table.add_row(
            str(rec.sweep),
            str(rec.budget),
            f"{rec.objective:.12g}",
            error,
            str(rec.streak),
        )

    console.print(table)
