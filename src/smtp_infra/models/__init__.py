"""Pydantic data models for deployment specifications."""

from smtp_infra.models.resources import (
    DeploymentSpec,
    ResourceKind,
    ResourceSpec,
    StackOutput,
)
from smtp_infra.models.validation import Severity, ValidationIssue

__all__ = [
    "DeploymentSpec",
    "ResourceKind",
    "ResourceSpec",
    "Severity",
    "StackOutput",
    "ValidationIssue",
]
