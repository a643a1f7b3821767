"""Pydantic models for environment profiles and resolved configuration."""

from __future__ import annotations

import ipaddress
from enum import Enum
from types import MappingProxyType
from typing import Annotated, Any, Mapping

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from smtp_infra.config.constants import PLACEHOLDER_SENTINELS


def freeze(value: Any) -> Any:
    """Return a read-only copy: mappings become proxies, sequences tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of ``freeze``, producing plain dicts and lists."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(v) for v in value]
    return value


# Read-only mapping fields; serialized back to plain dicts
FrozenTags = Annotated[
    Mapping[str, str],
    BeforeValidator(thaw),
    AfterValidator(freeze),
    PlainSerializer(thaw),
]
FrozenAttributes = Annotated[
    Mapping[str, Any],
    BeforeValidator(thaw),
    AfterValidator(freeze),
    PlainSerializer(thaw),
]


class EnvironmentName(str, Enum):
    """The closed set of deployable environments."""

    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"

    @property
    def cost_center(self) -> str:
        return _COST_CENTERS[self]


_COST_CENTERS = {
    EnvironmentName.DEV: "Development",
    EnvironmentName.STAGING: "Staging",
    EnvironmentName.PRODUCTION: "Production",
}


def is_valid_cidr(cidr: str) -> bool:
    """True for an IPv4/IPv6 network or a value holding a placeholder sentinel.

    Sentinels pass through so the placeholder check can report them.
    """
    if any(sentinel in cidr for sentinel in PLACEHOLDER_SENTINELS):
        return True
    try:
        ipaddress.ip_network(cidr, strict=False)
    except ValueError:
        return False
    return True


def _dedupe_cidrs(cidrs: tuple[str, ...]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for cidr in cidrs:
        cidr = cidr.strip()
        if not cidr:
            continue
        if not is_valid_cidr(cidr):
            raise ValueError(f"invalid CIDR '{cidr}'")
        seen.setdefault(cidr, None)
    return tuple(seen)


class AlarmSettings(BaseModel):
    """CPU alarm tuning for one environment."""

    model_config = ConfigDict(frozen=True)

    cpu_threshold: int = Field(gt=0, le=100, description="CPU utilization percent")
    evaluation_periods: int = Field(gt=0)


class LifecycleSettings(BaseModel):
    """Object-storage lifecycle transitions, in days."""

    model_config = ConfigDict(frozen=True)

    transition_to_ia_days: int = Field(default=30, gt=0)
    transition_to_glacier_days: int = Field(default=90, gt=0)


class EnvironmentProfile(BaseModel):
    """Default parameters for one named environment."""

    model_config = ConfigDict(frozen=True)

    instance_class: str = Field(description="EC2 instance type, e.g. t3.small")
    volume_size_gb: int = Field(gt=0)
    monitoring_enabled: bool
    backups_enabled: bool
    allowed_ssh_cidrs: tuple[str, ...] = Field(min_length=1)
    min_volume_size_gb: int = Field(default=20, gt=0)
    log_retention_days: int = Field(default=7, gt=0)
    max_azs: int = Field(default=2, gt=0)
    lifecycle: LifecycleSettings = Field(default_factory=LifecycleSettings)
    alarms: AlarmSettings

    @field_validator("allowed_ssh_cidrs")
    @classmethod
    def normalize_cidrs(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cidrs = _dedupe_cidrs(v)
        if not cidrs:
            raise ValueError("allowed_ssh_cidrs must not be empty")
        return cidrs


class OverrideContext(BaseModel):
    """Caller-supplied overrides. Unset keys stay ``None``, never defaulted.

    Accepts both snake_case names and the camelCase keys used by
    deployment context files (``keyPairName``, ``hostedZoneId`` ...).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    key_pair_name: str | None = Field(default=None, alias="keyPairName")
    domain_name: str | None = Field(default=None, alias="domainName")
    hosted_zone_id: str | None = Field(default=None, alias="hostedZoneId")
    instance_type: str | None = Field(default=None, alias="instanceType")
    ssh_cidrs: tuple[str, ...] | None = Field(default=None, alias="sshCidrs")
    session_manager: bool | None = Field(default=None, alias="sessionManager")
    preset: str | None = None

    def merged_over(self, base: OverrideContext) -> OverrideContext:
        """Return a context where keys set on *self* win over *base*."""
        data = base.model_dump(exclude_none=True)
        data.update(self.model_dump(exclude_none=True))
        return OverrideContext(**data)


class ResolvedConfig(BaseModel):
    """The single merged configuration for one invocation."""

    model_config = ConfigDict(frozen=True)

    environment: EnvironmentName
    instance_class: str
    volume_size_gb: int = Field(gt=0)
    monitoring_enabled: bool
    backups_enabled: bool
    allowed_ssh_cidrs: tuple[str, ...] = Field(min_length=1)
    key_pair_name: str | None = None
    domain_name: str | None = None
    hosted_zone_id: str | None = None
    account: str | None = None
    region: str | None = None
    session_manager_enabled: bool = False
    repository_url: str
    vpc_cidr: str
    min_volume_size_gb: int = Field(gt=0)
    log_retention_days: int = Field(gt=0)
    max_azs: int = Field(gt=0)
    lifecycle: LifecycleSettings
    alarms: AlarmSettings
    tags: FrozenTags = Field(default_factory=dict, validate_default=True)

    @field_validator("allowed_ssh_cidrs")
    @classmethod
    def normalize_cidrs(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        cidrs = _dedupe_cidrs(v)
        if not cidrs:
            raise ValueError("allowed_ssh_cidrs must not be empty")
        return cidrs

    @property
    def is_production(self) -> bool:
        return self.environment is EnvironmentName.PRODUCTION

    @property
    def has_admin_access(self) -> bool:
        return bool(self.key_pair_name) or self.session_manager_enabled

    @property
    def dns_enabled(self) -> bool:
        return bool(self.domain_name) and bool(self.hosted_zone_id)
