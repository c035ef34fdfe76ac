# Copyright (c) Syntropy Systems
"""resweep run command."""
from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console

from resweep.config import load_config
from resweep.driver import DriverStatus, run_optimization
from resweep.errors import ResweepError
from resweep.fingerprint import config_fingerprint
from resweep.logs import setup_logging
from resweep.problem import auxiliary_of, load_problem

console = Console()
logger = logging.getLogger(__name__)


def run(
    config_file: Path = typer.Argument(
        ...,
        help="Path to the run configuration YAML file",
        exists=True,
        dir_okay=False,
    ),
    fresh: bool = typer.Option(
        False,
        "--fresh",
        help="Ignore any existing checkpoint and start from scratch",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet", "-q",
        help="Do not log to the console (the run log is still written)",
    ),
) -> None:
    r"""Run a checkpointed sweep optimization.

    Example run.yaml:

    \b
        problem:
          factory: mypkg.chain:make_problem
          params: {length: 12}
        sweeps:
          nsweeps: 12
          budget: {min: 50, max: 800}
        convergence: {objective_tol: 1.0e-8, patience: 2}
        checkpoint: {every: 3, path: state.pkl}
    """
    try:
        loaded = load_config(config_file)
    except ResweepError as e:
        console.print(f"[red]Error loading config:[/red] {e}")
        raise typer.Exit(1) from e

    config = loaded.config
    if fresh:
        config.resume.enabled = False

    io = config.io
    _ = setup_logging(
        io.log_path,
        console_log=io.console_log and not quiet,
        console_level=io.console_level,
    )

    try:
        problem = load_problem(config.problem)
    except ResweepError as e:
        console.print(f"[red]Error loading problem:[/red] {e}")
        raise typer.Exit(1) from e

    try:
        result = run_optimization(
            config,
            problem.step,
            problem.initial_state,
            fingerprint=config_fingerprint(config),
            config_text=loaded.text,
            auxiliary=auxiliary_of(problem),
        )
    except ResweepError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except Exception as e:
        logger.exception("Optimization step failed")
        console.print(f"[red]Sweep failed:[/red] {e}")
        raise typer.Exit(1) from e

    status_style = {
        DriverStatus.CONVERGED: "green",
        DriverStatus.EXHAUSTED: "yellow",
    }.get(result.status, "white")
    objective = "-" if result.objective is None else f"{result.objective:.12g}"

    console.print(f"\n[bold]Run {result.status.value}[/bold]")
    console.print(
        f"  [dim]status:[/dim] [{status_style}]{result.status.value}[/{status_style}]"
    )
    console.print(f"  [dim]objective:[/dim] {objective}")
    console.print(f"  [dim]sweeps run:[/dim] {result.sweeps_run}")
    console.print(f"  [dim]last sweep:[/dim] {result.last_sweep}")
    console.print(f"  [dim]start:[/dim] {type(result.decision).__name__}")
    console.print(f"  [dim]checkpoint:[/dim] {config.checkpoint.path}")
