"""Root Typer app — global options and command registration."""

from __future__ import annotations

from typing import Optional

import typer

from smtp_infra import __version__
from smtp_infra.commands import context_cmd, env_cmd, synth, validate_cmd
from smtp_infra.log import configure_logging

app = typer.Typer(
    name="smtp-infra",
    help="Resolve, validate, and compose SMTP server deployments.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def version_callback(value: bool) -> None:
    if value:
        print(f"smtp-infra {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: Optional[bool] = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version and exit."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs on stderr."),
) -> None:
    """SMTP server infrastructure — dev, staging, and production stacks."""
    configure_logging(verbose)


app.command("synth")(synth.synth)
app.command("validate")(validate_cmd.validate_command)
app.add_typer(env_cmd.app, name="env")
app.add_typer(context_cmd.app, name="context")


def main() -> None:
    app()
