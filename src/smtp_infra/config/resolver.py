"""Config resolver — merge registry defaults, process env, and overrides."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from smtp_infra.config import registry
from smtp_infra.config.constants import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_GIT_REPOSITORY,
    ENV_ACCOUNT,
    ENV_DOMAIN_NAME,
    ENV_ENVIRONMENT,
    ENV_GIT_REPOSITORY,
    ENV_HOSTED_ZONE_ID,
    ENV_KEY_PAIR_NAME,
    ENV_REGION,
    ENV_SSM_ACCESS,
    ENV_STRICT_VALIDATION,
    POLICY_DOMAINS,
    TRUTHY_VALUES,
    VPC_CIDR,
)
from smtp_infra.config.models import (
    EnvironmentName,
    OverrideContext,
    ResolvedConfig,
    is_valid_cidr,
)
from smtp_infra.errors import ConfigurationError
from smtp_infra.log import get_logger
from smtp_infra.stack.tags import build_tags

logger = get_logger(__name__)


def _env_value(process_env: Mapping[str, str], key: str) -> str | None:
    """Read *key*, treating missing and blank values alike."""
    value = process_env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _env_flag(process_env: Mapping[str, str], key: str) -> bool:
    value = _env_value(process_env, key)
    return value is not None and value.lower() in TRUTHY_VALUES


def _first(*values: str | None) -> str | None:
    return next((v for v in values if v), None)


def environment_from(
    process_env: Mapping[str, str],
    explicit: str | None = None,
) -> EnvironmentName:
    """Pick the environment selector.

    Precedence: explicit selector > ``ENVIRONMENT`` > ``dev``.
    """
    name = _first(explicit, _env_value(process_env, ENV_ENVIRONMENT), DEFAULT_ENVIRONMENT)
    return registry.parse_environment(name)  # type: ignore[arg-type]


def strict_from(process_env: Mapping[str, str]) -> bool:
    """Return the strict-validation flag from the process environment."""
    return _env_flag(process_env, ENV_STRICT_VALIDATION)


def parse_ssh_cidrs(values: Sequence[str]) -> tuple[str, ...]:
    """Normalize an SSH CIDR override, rejecting empty or malformed input."""
    cidrs = tuple(c.strip() for c in values if c.strip())
    if not cidrs:
        raise ConfigurationError("SSH CIDR override must contain at least one CIDR")
    invalid = [c for c in cidrs if not is_valid_cidr(c)]
    if invalid:
        raise ConfigurationError(f"Invalid SSH CIDR: {', '.join(invalid)}")
    return cidrs


def _coerce_overrides(
    overrides: OverrideContext | Mapping[str, Any] | None,
) -> OverrideContext:
    if overrides is None:
        return OverrideContext()
    if isinstance(overrides, OverrideContext):
        return overrides
    return OverrideContext.model_validate(dict(overrides))


def resolve(
    env_name: str | EnvironmentName,
    overrides: OverrideContext | Mapping[str, Any] | None = None,
    process_env: Mapping[str, str] | None = None,
) -> ResolvedConfig:
    """Resolve the configuration for one environment.

    Precedence: explicit override > process env > preset > profile default.
    The mail domain and hosted zone are only read from the process env for
    staging and production; an explicit override applies to any environment.
    Staging and production fall back to the policy domain when nothing
    supplies one. Account and region come from the process env only.
    """
    env = registry.parse_environment(env_name)
    profile = registry.get(env)
    ctx = _coerce_overrides(overrides)
    penv: Mapping[str, str] = process_env if process_env is not None else {}

    instance_class = profile.instance_class
    volume_size_gb = profile.volume_size_gb
    if ctx.preset:
        instance_class, volume_size_gb = registry.get_preset(ctx.preset, env)
    instance_class = _first(ctx.instance_type, instance_class)  # type: ignore[assignment]

    if ctx.ssh_cidrs is not None:
        cidrs = parse_ssh_cidrs(ctx.ssh_cidrs)
    else:
        cidrs = profile.allowed_ssh_cidrs

    domain_name = ctx.domain_name or None
    hosted_zone_id = ctx.hosted_zone_id or None
    if env is not EnvironmentName.DEV:
        domain_name = _first(
            domain_name,
            _env_value(penv, ENV_DOMAIN_NAME),
            POLICY_DOMAINS[env.value],
        )
        hosted_zone_id = _first(hosted_zone_id, _env_value(penv, ENV_HOSTED_ZONE_ID))

    if ctx.session_manager is not None:
        session_manager = ctx.session_manager
    else:
        session_manager = _env_flag(penv, ENV_SSM_ACCESS)

    config = ResolvedConfig(
        environment=env,
        instance_class=instance_class,
        volume_size_gb=volume_size_gb,
        monitoring_enabled=profile.monitoring_enabled,
        backups_enabled=profile.backups_enabled,
        allowed_ssh_cidrs=cidrs,
        key_pair_name=_first(ctx.key_pair_name, _env_value(penv, ENV_KEY_PAIR_NAME)),
        domain_name=domain_name,
        hosted_zone_id=hosted_zone_id,
        account=_env_value(penv, ENV_ACCOUNT),
        region=_env_value(penv, ENV_REGION),
        session_manager_enabled=session_manager,
        repository_url=_env_value(penv, ENV_GIT_REPOSITORY) or DEFAULT_GIT_REPOSITORY,
        vpc_cidr=VPC_CIDR,
        min_volume_size_gb=profile.min_volume_size_gb,
        log_retention_days=profile.log_retention_days,
        max_azs=profile.max_azs,
        lifecycle=profile.lifecycle,
        alarms=profile.alarms,
        tags=build_tags(env),
    )
    logger.debug(
        "config_resolved",
        environment=env.value,
        instance_class=config.instance_class,
        volume_size_gb=config.volume_size_gb,
        preset=ctx.preset,
        dns=config.dns_enabled,
    )
    return config
