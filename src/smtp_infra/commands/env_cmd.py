"""Environment commands — inspect the environment registry."""

from __future__ import annotations

from typing import Annotated

import typer

from smtp_infra.commands._common import FormatOpt
from smtp_infra.config import registry
from smtp_infra.errors import error_handler
from smtp_infra.output.formatter import output

app = typer.Typer(name="env", help="Inspect per-environment defaults.")


@app.command("list")
@error_handler
def list_envs(fmt: FormatOpt = "table") -> None:
    """List every environment and its default sizing."""
    profiles = {name: registry.get(name) for name in registry.names()}
    columns = ["Name", "Instance", "Volume (GB)", "Monitoring", "Backups", "SSH CIDRs"]
    rows = [
        [
            name,
            p.instance_class,
            p.volume_size_gb,
            p.monitoring_enabled,
            p.backups_enabled,
            p.allowed_ssh_cidrs,
        ]
        for name, p in profiles.items()
    ]
    output(
        {name: p.model_dump(mode="json") for name, p in profiles.items()},
        fmt,
        columns=columns,
        rows=rows,
        title="Environments",
    )


@app.command()
@error_handler
def show(
    name: Annotated[str, typer.Argument(help="Environment name")],
    fmt: FormatOpt = "table",
) -> None:
    """Show the full default profile of one environment."""
    profile = registry.get(name)
    if fmt != "table":
        output(profile.model_dump(mode="json"), fmt)
        return
    data = {
        "instance_class": profile.instance_class,
        "volume_size_gb": profile.volume_size_gb,
        "min_volume_size_gb": profile.min_volume_size_gb,
        "monitoring_enabled": profile.monitoring_enabled,
        "backups_enabled": profile.backups_enabled,
        "allowed_ssh_cidrs": profile.allowed_ssh_cidrs,
        "log_retention_days": profile.log_retention_days,
        "max_azs": profile.max_azs,
        "cpu_threshold": f"{profile.alarms.cpu_threshold}%",
        "evaluation_periods": profile.alarms.evaluation_periods,
    }
    output(data, fmt, title=f"Environment: {name}")


@app.command()
@error_handler
def presets(fmt: FormatOpt = "table") -> None:
    """List sizing presets."""
    data: dict[str, dict[str, str]] = {}
    for preset in registry.preset_names():
        data[preset] = {}
        for name in registry.names():
            instance, volume = registry.get_preset(preset, name)
            data[preset][name] = f"{instance} / {volume}GB"
    rows = [[preset, *sizes.values()] for preset, sizes in data.items()]
    output(data, fmt, columns=["Preset", *registry.names()], rows=rows, title="Presets")
