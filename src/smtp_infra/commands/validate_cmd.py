"""Validate command — check resolved configuration against policy."""

from __future__ import annotations

import os
from typing import Annotated

import typer
from rich.console import Console

from smtp_infra.commands._common import (
    DomainOpt,
    EnvOpt,
    FormatOpt,
    HostedZoneOpt,
    InstanceTypeOpt,
    KeyPairOpt,
    NoContextOpt,
    PresetOpt,
    SessionManagerOpt,
    SshCidrOpt,
    StrictOpt,
    build_overrides,
    effective_overrides,
)
from smtp_infra.config import registry
from smtp_infra.config.resolver import environment_from, resolve, strict_from
from smtp_infra.errors import ConfigValidationError, error_handler
from smtp_infra.models.validation import ValidationIssue
from smtp_infra.output.formatter import output
from smtp_infra.output.tables import issues_table
from smtp_infra.stack.validator import has_errors, validate

console = Console()


@error_handler
def validate_command(
    env: EnvOpt = None,
    all_envs: Annotated[bool, typer.Option(
        "--all", "-a", help="Validate every environment",
    )] = False,
    key_pair: KeyPairOpt = None,
    domain: DomainOpt = None,
    hosted_zone: HostedZoneOpt = None,
    instance_type: InstanceTypeOpt = None,
    ssh_cidr: SshCidrOpt = None,
    session_manager: SessionManagerOpt = None,
    preset: PresetOpt = None,
    strict: StrictOpt = None,
    no_context: NoContextOpt = False,
    fmt: FormatOpt = "table",
) -> None:
    """Validate the resolved configuration for one or all environments."""
    if all_envs and env is not None:
        console.print("[red]--all and --env cannot be combined.[/]")
        raise typer.Exit(1)

    process_env = os.environ
    if strict is None:
        strict = strict_from(process_env)

    if all_envs:
        targets = [registry.parse_environment(name) for name in registry.names()]
    else:
        targets = [environment_from(process_env, env)]

    flags = build_overrides(
        key_pair=key_pair,
        domain=domain,
        hosted_zone=hosted_zone,
        instance_type=instance_type,
        ssh_cidrs=ssh_cidr,
        session_manager=session_manager,
        preset=preset,
    )
    found: dict[str, list[ValidationIssue]] = {}
    for target in targets:
        overrides = effective_overrides(target, flags, use_context=not no_context)
        config = resolve(target, overrides, process_env)
        found[target.value] = validate(config, strict=strict)

    all_issues = [issue for issues in found.values() for issue in issues]

    if fmt != "table":
        output(
            {name: [i.model_dump(mode="json") for i in issues] for name, issues in found.items()},
            fmt,
        )
    else:
        for name, issues in found.items():
            if issues:
                console.print(issues_table(issues, title=f"Issues: {name}"))
            else:
                console.print(f"[green]{name}: configuration is clean.[/]")

    if strict and has_errors(all_issues):
        raise ConfigValidationError(all_issues)
