"""Resolve, validate, compose, and tag in one call."""

from __future__ import annotations

from typing import Any, Mapping, NamedTuple

from smtp_infra.config.models import EnvironmentName, OverrideContext
from smtp_infra.config.resolver import environment_from, resolve, strict_from
from smtp_infra.log import get_logger
from smtp_infra.models.resources import DeploymentSpec
from smtp_infra.models.validation import ValidationIssue
from smtp_infra.stack.composer import compose
from smtp_infra.stack.tags import tag
from smtp_infra.stack.validator import raise_for_issues, validate

logger = get_logger(__name__)


class Synthesis(NamedTuple):
    spec: DeploymentSpec
    issues: list[ValidationIssue]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if not i.is_error]


def synthesize(
    env_name: str | EnvironmentName | None = None,
    overrides: OverrideContext | Mapping[str, Any] | None = None,
    process_env: Mapping[str, str] | None = None,
    *,
    strict: bool | None = None,
) -> Synthesis:
    """Run the full pipeline and return the tagged spec with its issues.

    ``env_name`` falls back to ``ENVIRONMENT`` and then ``dev``; ``strict``
    falls back to ``STRICT_VALIDATION``. In strict mode any error-severity
    issue raises ``ConfigValidationError`` before composition starts.
    """
    penv: Mapping[str, str] = process_env if process_env is not None else {}
    if isinstance(env_name, EnvironmentName):
        env_name = env_name.value
    env = environment_from(penv, env_name)
    if strict is None:
        strict = strict_from(penv)

    config = resolve(env, overrides, penv)
    issues = validate(config, strict=strict)
    if strict:
        raise_for_issues(issues)
    for issue in issues:
        logger.debug("validation_issue", code=issue.code, severity=issue.severity.value)

    spec = tag(compose(config), config)
    logger.info("stack_synthesized", stack=spec.stack_name, resources=len(spec.resources))
    return Synthesis(spec=spec, issues=issues)
