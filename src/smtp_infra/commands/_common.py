"""Shared helpers for CLI commands — option types and override assembly."""

from __future__ import annotations

from typing import Annotated

import typer

from smtp_infra.config.manager import ContextManager
from smtp_infra.config.models import EnvironmentName, OverrideContext

# Shared Typer option type aliases
EnvOpt = Annotated[
    str | None,
    typer.Option("--env", "-e", help="Environment: dev, staging, or production"),
]
KeyPairOpt = Annotated[
    str | None,
    typer.Option("--key-pair", "-k", help="EC2 key pair name for SSH access"),
]
DomainOpt = Annotated[
    str | None,
    typer.Option("--domain", help="Mail domain name"),
]
HostedZoneOpt = Annotated[
    str | None,
    typer.Option("--hosted-zone", help="Route53 hosted zone ID"),
]
InstanceTypeOpt = Annotated[
    str | None,
    typer.Option("--instance-type", "-i", help="Instance type override"),
]
SshCidrOpt = Annotated[
    list[str] | None,
    typer.Option("--ssh-cidr", help="Allowed SSH CIDR (repeatable)"),
]
SessionManagerOpt = Annotated[
    bool | None,
    typer.Option(
        "--session-manager/--no-session-manager",
        help="Allow admin access through SSM Session Manager",
    ),
]
PresetOpt = Annotated[
    str | None,
    typer.Option("--preset", help="Sizing preset: cost-optimized or high-performance"),
]
StrictOpt = Annotated[
    bool | None,
    typer.Option(
        "--strict/--no-strict",
        help="Escalate policy warnings to errors (default: STRICT_VALIDATION)",
    ),
]
NoContextOpt = Annotated[
    bool,
    typer.Option("--no-context", help="Ignore the saved context for the environment"),
]
FormatOpt = Annotated[
    str,
    typer.Option("--format", "-f", help="Output format: table, json, or yaml"),
]


def get_context_manager() -> ContextManager:
    return ContextManager()


def build_overrides(
    *,
    key_pair: str | None = None,
    domain: str | None = None,
    hosted_zone: str | None = None,
    instance_type: str | None = None,
    ssh_cidrs: list[str] | None = None,
    session_manager: bool | None = None,
    preset: str | None = None,
) -> OverrideContext:
    """Assemble an OverrideContext from CLI flags; unset flags stay unset."""
    return OverrideContext(
        key_pair_name=key_pair,
        domain_name=domain,
        hosted_zone_id=hosted_zone,
        instance_type=instance_type,
        ssh_cidrs=tuple(ssh_cidrs) if ssh_cidrs else None,
        session_manager=session_manager,
        preset=preset,
    )


def effective_overrides(
    env: EnvironmentName,
    flags: OverrideContext,
    *,
    use_context: bool = True,
) -> OverrideContext:
    """Merge CLI flags over the saved context for *env*; flags win."""
    if not use_context:
        return flags
    saved = get_context_manager().get_context(env)
    return flags.merged_over(saved)
