"""Validator — operational-safety policy checks on a resolved configuration.

Each rule yields at most one issue. Rules run in a fixed order, so the
returned sequence is stable for a given configuration:

1. SSH open to ``0.0.0.0/0`` (error under strict mode in production)
2. placeholder values left in place (error under strict mode anywhere)
3. root volume below the environment minimum (always a warning)
4. production without backups (always an error)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from smtp_infra.config import registry
from smtp_infra.config.constants import ANY_IPV4, PLACEHOLDER_SENTINELS
from smtp_infra.config.models import ResolvedConfig
from smtp_infra.config.resolver import resolve
from smtp_infra.errors import ConfigValidationError
from smtp_infra.log import get_logger
from smtp_infra.models.validation import Severity, ValidationIssue

logger = get_logger(__name__)


def _escalate(strict_applies: bool) -> Severity:
    return Severity.ERROR if strict_applies else Severity.WARNING


def _placeholder_fields(config: ResolvedConfig) -> list[str]:
    candidates: list[tuple[str, str | None]] = [
        ("allowed_ssh_cidrs", ", ".join(config.allowed_ssh_cidrs)),
        ("key_pair_name", config.key_pair_name),
        ("domain_name", config.domain_name),
        ("hosted_zone_id", config.hosted_zone_id),
        ("repository_url", config.repository_url),
    ]
    return [
        field
        for field, value in candidates
        if value and any(sentinel in value for sentinel in PLACEHOLDER_SENTINELS)
    ]


def _check_open_ssh(config: ResolvedConfig, strict: bool) -> ValidationIssue | None:
    if ANY_IPV4 not in config.allowed_ssh_cidrs:
        return None
    return ValidationIssue(
        severity=_escalate(strict and config.is_production),
        code="ssh-open-to-world",
        message=(
            f"SSH (port 22) in '{config.environment.value}' is open to {ANY_IPV4}. "
            "Restrict it to known CIDRs."
        ),
    )


def _check_placeholders(config: ResolvedConfig, strict: bool) -> ValidationIssue | None:
    fields = _placeholder_fields(config)
    if not fields:
        return None
    return ValidationIssue(
        severity=_escalate(strict),
        code="placeholder-value",
        message=f"Placeholder value still set in: {', '.join(fields)}",
    )


def _check_volume_size(config: ResolvedConfig, strict: bool) -> ValidationIssue | None:
    if config.volume_size_gb >= config.min_volume_size_gb:
        return None
    return ValidationIssue(
        severity=Severity.WARNING,
        code="volume-too-small",
        message=(
            f"'{config.environment.value}' volume size is very small "
            f"({config.volume_size_gb}GB, minimum {config.min_volume_size_gb}GB)"
        ),
    )


def _check_backups(config: ResolvedConfig, strict: bool) -> ValidationIssue | None:
    if not config.is_production or config.backups_enabled:
        return None
    return ValidationIssue(
        severity=Severity.ERROR,
        code="backups-required",
        message="Backups must be enabled in production",
    )


_RULES = (
    _check_open_ssh,
    _check_placeholders,
    _check_volume_size,
    _check_backups,
)


def validate(config: ResolvedConfig, strict: bool = False) -> list[ValidationIssue]:
    """Return the policy issues for *config*; an empty list means clean."""
    issues: list[ValidationIssue] = []
    for rule in _RULES:
        issue = rule(config, strict)
        if issue is not None:
            issues.append(issue)
    logger.debug(
        "config_validated",
        environment=config.environment.value,
        strict=strict,
        issues=[i.code for i in issues],
    )
    return issues


def has_errors(issues: Iterable[ValidationIssue]) -> bool:
    return any(issue.is_error for issue in issues)


def raise_for_issues(issues: Sequence[ValidationIssue]) -> None:
    """Raise ``ConfigValidationError`` when any issue is an error."""
    if has_errors(issues):
        raise ConfigValidationError(issues)


def validate_registry(strict: bool = False) -> dict[str, list[ValidationIssue]]:
    """Validate the default profile of every registered environment."""
    return {name: validate(resolve(name), strict) for name in registry.names()}
