"""Context commands — manage saved overrides per environment."""

from __future__ import annotations

from typing import Annotated

import typer
from rich.console import Console
from rich.prompt import Confirm

from smtp_infra.commands._common import (
    DomainOpt,
    FormatOpt,
    HostedZoneOpt,
    InstanceTypeOpt,
    KeyPairOpt,
    PresetOpt,
    SessionManagerOpt,
    SshCidrOpt,
    build_overrides,
    get_context_manager,
)
from smtp_infra.config import registry
from smtp_infra.config.resolver import parse_ssh_cidrs
from smtp_infra.errors import error_handler
from smtp_infra.output.formatter import output

app = typer.Typer(name="context", help="Manage saved override contexts.")
console = Console()

EnvArg = Annotated[str, typer.Argument(help="Environment name")]


@app.command("set")
@error_handler
def set_context(
    env: EnvArg,
    key_pair: KeyPairOpt = None,
    domain: DomainOpt = None,
    hosted_zone: HostedZoneOpt = None,
    instance_type: InstanceTypeOpt = None,
    ssh_cidr: SshCidrOpt = None,
    session_manager: SessionManagerOpt = None,
    preset: PresetOpt = None,
) -> None:
    """Save override values for an environment."""
    name = registry.parse_environment(env).value
    flags = build_overrides(
        key_pair=key_pair,
        domain=domain,
        hosted_zone=hosted_zone,
        instance_type=instance_type,
        ssh_cidrs=ssh_cidr,
        session_manager=session_manager,
        preset=preset,
    )
    if preset:
        registry.get_preset(preset, name)
    if ssh_cidr:
        parse_ssh_cidrs(ssh_cidr)
    if not flags.model_dump(exclude_none=True):
        console.print("[yellow]Nothing to save. Pass at least one option.[/]")
        raise typer.Exit(1)
    mgr = get_context_manager()
    mgr.set_context(name, flags)
    console.print(f"[green]Context for '{name}' saved.[/]")
    console.print(f"Context file: {mgr.context_path}")


@app.command()
@error_handler
def show(env: EnvArg, fmt: FormatOpt = "table") -> None:
    """Show saved override values for an environment."""
    name = registry.parse_environment(env).value
    ctx = get_context_manager().get_context(name)
    data = ctx.model_dump(mode="json", exclude_none=True)
    if not data:
        console.print(f"[yellow]No saved context for '{name}'.[/]")
        return
    output(data, fmt, title=f"Context: {name}")


@app.command()
@error_handler
def clear(
    env: EnvArg,
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation")] = False,
) -> None:
    """Remove the saved context for an environment."""
    name = registry.parse_environment(env).value
    mgr = get_context_manager()
    if not mgr.get_context(name).model_dump(exclude_none=True):
        console.print(f"[red]No saved context for '{name}'.[/]")
        raise typer.Exit(1)

    if not force:
        if not Confirm.ask(f"Clear saved context for '{name}'?"):
            console.print("Cancelled.")
            return

    mgr.clear_context(name)
    console.print(f"[green]Context for '{name}' cleared.[/]")
