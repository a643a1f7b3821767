"""Synth command — produce the deployment specification for an environment."""

from __future__ import annotations

import os
from pathlib import Path
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
from smtp_infra.config.resolver import environment_from
from smtp_infra.errors import err_console, error_handler
from smtp_infra.output.formatter import output, write_document
from smtp_infra.output.tables import issues_table
from smtp_infra.stack.pipeline import synthesize

console = Console()


@error_handler
def synth(
    env: EnvOpt = None,
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
    output_path: Annotated[Path | None, typer.Option(
        "--output", "-o", help="Write the deployment document to a .json or .yaml file",
    )] = None,
) -> None:
    """Resolve, validate, and compose the deployment spec for an environment."""
    process_env = os.environ
    env_name = environment_from(process_env, env)
    flags = build_overrides(
        key_pair=key_pair,
        domain=domain,
        hosted_zone=hosted_zone,
        instance_type=instance_type,
        ssh_cidrs=ssh_cidr,
        session_manager=session_manager,
        preset=preset,
    )
    overrides = effective_overrides(env_name, flags, use_context=not no_context)
    result = synthesize(env_name, overrides, process_env, strict=strict)
    spec = result.spec

    if result.issues:
        err_console.print(issues_table(result.issues, title="Validation Issues"))

    if output_path is not None:
        write_document(spec.to_document(), output_path)
        console.print(
            f"[green]Wrote {spec.stack_name} ({len(spec.resources)} resources) "
            f"to {output_path}[/]"
        )
        return

    if fmt != "table":
        output(spec.to_document(), fmt)
        return

    rows = [
        [i, r.kind.value, r.name, r.tags]
        for i, r in enumerate(spec.resources, start=1)
    ]
    output(
        spec.to_document(), fmt,
        columns=["#", "Kind", "Name", "Tags"], rows=rows,
        title=f"{spec.stack_name}: {spec.description}",
    )
