"""Tag assigner — ownership and cost metadata for every resource."""

from __future__ import annotations

from smtp_infra.config.constants import MANAGED_BY_LABEL, PROJECT_LABEL
from smtp_infra.config.models import EnvironmentName, ResolvedConfig
from smtp_infra.models.resources import DeploymentSpec, ResourceSpec


def build_tags(environment: EnvironmentName) -> dict[str, str]:
    """Return the tag mapping for *environment*.

    Four entries everywhere; production adds ``Backup: Required``.
    """
    tags = {
        "Environment": environment.value,
        "Project": PROJECT_LABEL,
        "ManagedBy": MANAGED_BY_LABEL,
        "CostCenter": environment.cost_center,
    }
    if environment is EnvironmentName.PRODUCTION:
        tags["Backup"] = "Required"
    return tags


def tag(spec: DeploymentSpec, config: ResolvedConfig) -> DeploymentSpec:
    """Return a copy of *spec* with every resource carrying the tag mapping."""
    tags = build_tags(config.environment)
    # Rebuilt through validation so each resource gets its own read-only tags
    resources = tuple(
        ResourceSpec(kind=resource.kind, name=resource.name,
                     attributes=resource.attributes, tags=tags)
        for resource in spec.resources
    )
    return spec.model_copy(update={"resources": resources})
