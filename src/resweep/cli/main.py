# Copyright (c) Syntropy Systems
"""Main CLI entry point for resweep."""

import typer

from resweep.cli.inspect_cmd import history, inspect_checkpoint
from resweep.cli.run import run
from resweep.cli.schedule import schedule

app = typer.Typer(
    name="resweep",
    help=(
        "Resumable sweep optimization. Expand budget schedules, stop on "
        "convergence, checkpoint and resume."
    ),
    no_args_is_help=True,
    add_completion=False,
)

# Register commands
_ = app.command()(run)
_ = app.command()(schedule)
_ = app.command(name="inspect")(inspect_checkpoint)
_ = app.command()(history)


if __name__ == "__main__":
    app()
