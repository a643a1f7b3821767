"""Environment registry — fixed per-environment defaults and sizing presets.

The table is built once at import time and is read-only afterwards. Adding
an environment means adding an ``EnvironmentName`` member and a profile
here; nothing else falls back to a default entry.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from smtp_infra.config.constants import ANY_IPV4
from smtp_infra.config.models import AlarmSettings, EnvironmentName, EnvironmentProfile
from smtp_infra.errors import ConfigurationError, UnknownEnvironment

_PROFILES: Mapping[EnvironmentName, EnvironmentProfile] = MappingProxyType({
    EnvironmentName.DEV: EnvironmentProfile(
        instance_class="t3.small",
        volume_size_gb=30,
        monitoring_enabled=False,
        backups_enabled=False,
        allowed_ssh_cidrs=(ANY_IPV4,),
        min_volume_size_gb=20,
        log_retention_days=7,
        alarms=AlarmSettings(cpu_threshold=90, evaluation_periods=3),
    ),
    EnvironmentName.STAGING: EnvironmentProfile(
        instance_class="t3.medium",
        volume_size_gb=50,
        monitoring_enabled=True,
        backups_enabled=True,
        allowed_ssh_cidrs=(ANY_IPV4,),
        min_volume_size_gb=20,
        log_retention_days=14,
        alarms=AlarmSettings(cpu_threshold=85, evaluation_periods=2),
    ),
    # Open until an operator restricts it; the validator flags this and
    # strict mode refuses to compose it.
    EnvironmentName.PRODUCTION: EnvironmentProfile(
        instance_class="t3.large",
        volume_size_gb=100,
        monitoring_enabled=True,
        backups_enabled=True,
        allowed_ssh_cidrs=(ANY_IPV4,),
        min_volume_size_gb=50,
        log_retention_days=30,
        alarms=AlarmSettings(cpu_threshold=80, evaluation_periods=2),
    ),
})

# (instance class, volume size GB) per environment
_PRESETS: Mapping[str, Mapping[EnvironmentName, tuple[str, int]]] = MappingProxyType({
    "cost-optimized": MappingProxyType({
        EnvironmentName.DEV: ("t3.micro", 20),
        EnvironmentName.STAGING: ("t3.small", 30),
        EnvironmentName.PRODUCTION: ("t3.medium", 50),
    }),
    "high-performance": MappingProxyType({
        EnvironmentName.DEV: ("t3.medium", 50),
        EnvironmentName.STAGING: ("t3.large", 100),
        EnvironmentName.PRODUCTION: ("t3.xlarge", 200),
    }),
})


def names() -> list[str]:
    """Return the registered environment names in declaration order."""
    return [env.value for env in _PROFILES]


def parse_environment(name: str | EnvironmentName) -> EnvironmentName:
    """Map *name* onto the closed ``EnvironmentName`` set."""
    if isinstance(name, EnvironmentName):
        return name
    try:
        return EnvironmentName(name)
    except ValueError:
        raise UnknownEnvironment(str(name), names()) from None


def get(name: str | EnvironmentName) -> EnvironmentProfile:
    """Return the profile for *name*, raising ``UnknownEnvironment`` otherwise."""
    return _PROFILES[parse_environment(name)]


def preset_names() -> list[str]:
    return list(_PRESETS)


def get_preset(preset: str, name: str | EnvironmentName) -> tuple[str, int]:
    """Return ``(instance_class, volume_size_gb)`` for a sizing preset."""
    env = parse_environment(name)
    sizes = _PRESETS.get(preset)
    if sizes is None:
        raise ConfigurationError(
            f"Unknown preset '{preset}'. Available: {', '.join(preset_names())}"
        )
    return sizes[env]
