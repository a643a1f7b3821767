"""Context store — read/write saved override contexts per environment."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, Field

from smtp_infra.config import registry
from smtp_infra.config.constants import CONTEXT_FILE
from smtp_infra.config.models import EnvironmentName, OverrideContext
from smtp_infra.errors import ConfigurationError
from smtp_infra.log import get_logger

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

logger = get_logger(__name__)


class ContextFile(BaseModel):
    """Root model of the context file."""

    environments: dict[str, OverrideContext] = Field(default_factory=dict)


class ContextManager:
    """Manages saved override contexts on disk."""

    def __init__(self, context_path: Path | None = None) -> None:
        self.context_path = context_path or CONTEXT_FILE
        self._data: ContextFile | None = None

    @property
    def data(self) -> ContextFile:
        if self._data is None:
            self._data = self._load()
        return self._data

    def _load(self) -> ContextFile:
        if not self.context_path.exists():
            return ContextFile()
        try:
            data = tomllib.loads(self.context_path.read_bytes().decode())
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Cannot read context file {self.context_path}: {exc}"
            ) from exc
        environments: dict[str, OverrideContext] = {}
        for name, ctx_data in data.get("environments", {}).items():
            env = registry.parse_environment(name)
            environments[env.value] = OverrideContext(**ctx_data)
        return ContextFile(environments=environments)

    def save(self) -> None:
        self.context_path.parent.mkdir(parents=True, exist_ok=True)
        # Secure directory permissions (owner-only)
        os.chmod(self.context_path.parent, 0o700)
        data: dict[str, Any] = {}
        envs = {
            name: ctx.model_dump(exclude_none=True)
            for name, ctx in self.data.environments.items()
        }
        envs = {name: values for name, values in envs.items() if values}
        if envs:
            data["environments"] = {
                name: {k: list(v) if isinstance(v, tuple) else v for k, v in values.items()}
                for name, values in envs.items()
            }
        # Atomic write: write to temp file, then rename
        temp = self.context_path.with_suffix(".tmp")
        fd = os.open(str(temp), os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.write(fd, tomli_w.dumps(data).encode())
        finally:
            os.close(fd)
        temp.replace(self.context_path)
        logger.debug("context_saved", path=str(self.context_path))

    def get_context(self, env: str | EnvironmentName) -> OverrideContext:
        name = registry.parse_environment(env).value
        return self.data.environments.get(name, OverrideContext())

    def set_context(self, env: str | EnvironmentName, ctx: OverrideContext) -> OverrideContext:
        """Merge *ctx* over the saved context for *env* and persist it."""
        name = registry.parse_environment(env).value
        merged = ctx.merged_over(self.get_context(name))
        self.data.environments[name] = merged
        self.save()
        return merged

    def clear_context(self, env: str | EnvironmentName) -> bool:
        name = registry.parse_environment(env).value
        if name not in self.data.environments:
            return False
        del self.data.environments[name]
        self.save()
        return True
