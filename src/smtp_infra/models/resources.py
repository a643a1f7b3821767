"""Resource and deployment specification models."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from smtp_infra.config.models import FrozenAttributes, FrozenTags, ResolvedConfig


class ResourceKind(str, Enum):
    """Resource kinds, declared in composition order."""

    NETWORK = "network"
    COMPUTE = "compute"
    SECURITY = "security"
    STORAGE = "storage"
    SECRET = "secret"
    MONITORING = "monitoring"
    BACKUP = "backup"
    DNS = "dns"


class ResourceSpec(BaseModel):
    """Declarative description of one infrastructure resource."""

    model_config = ConfigDict(frozen=True)

    kind: ResourceKind
    name: str
    attributes: FrozenAttributes = Field(default_factory=dict, validate_default=True)
    tags: FrozenTags = Field(default_factory=dict, validate_default=True)


class StackOutput(BaseModel):
    """An identifier the provisioning backend is expected to report back."""

    model_config = ConfigDict(frozen=True)

    key: str
    description: str
    export_name: str | None = None
    value: str | None = None


class DeploymentSpec(BaseModel):
    """Ordered resource specifications plus the config they came from."""

    model_config = ConfigDict(frozen=True)

    stack_name: str
    description: str
    config: ResolvedConfig
    resources: tuple[ResourceSpec, ...] = ()
    outputs: tuple[StackOutput, ...] = ()

    @property
    def kinds(self) -> list[ResourceKind]:
        return [r.kind for r in self.resources]

    def get(self, kind: ResourceKind) -> ResourceSpec | None:
        return next((r for r in self.resources if r.kind is kind), None)

    def to_document(self) -> dict[str, Any]:
        """Return a JSON-compatible document for the provisioning backend."""
        return self.model_dump(mode="json")
