"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from smtp_infra.config import constants
from smtp_infra.config.manager import ContextManager
from smtp_infra.config.models import OverrideContext, ResolvedConfig
from smtp_infra.config.resolver import resolve
from smtp_infra.log import reset_logging

_ENV_VARS = (
    constants.ENV_ENVIRONMENT,
    constants.ENV_KEY_PAIR_NAME,
    constants.ENV_DOMAIN_NAME,
    constants.ENV_HOSTED_ZONE_ID,
    constants.ENV_ACCOUNT,
    constants.ENV_REGION,
    constants.ENV_STRICT_VALIDATION,
    constants.ENV_SSM_ACCESS,
    constants.ENV_GIT_REPOSITORY,
)

REAL_REPO = "https://github.com/acme/smtp-server.git"


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Keep the host's deployment variables and saved contexts out of tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(
        "smtp_infra.config.manager.CONTEXT_FILE", tmp_path / "home" / "context.toml",
    )
    yield
    # CLI runs attach a stderr handler bound to the runner's stream
    reset_logging()


@pytest.fixture
def tmp_context(tmp_path: Path) -> Path:
    """Return a temporary context file path."""
    return tmp_path / "context.toml"


@pytest.fixture
def context_manager(tmp_context: Path) -> ContextManager:
    """Return a ContextManager pointed at a temp context file."""
    return ContextManager(context_path=tmp_context)


@pytest.fixture
def process_env() -> dict[str, str]:
    """A realistic process environment for a CI deploy job."""
    return {
        "KEY_PAIR_NAME": "smtp-ops",
        "CDK_DEFAULT_ACCOUNT": "123456789012",
        "CDK_DEFAULT_REGION": "eu-west-1",
        "SMTP_GIT_REPOSITORY": REAL_REPO,
    }


@pytest.fixture
def dev_config(process_env: dict[str, str]) -> ResolvedConfig:
    return resolve("dev", {}, process_env)


@pytest.fixture
def production_config(process_env: dict[str, str]) -> ResolvedConfig:
    """Production with restricted SSH and a hosted zone: clean under strict."""
    return resolve(
        "production",
        OverrideContext(ssh_cidrs=("203.0.113.0/24",), hosted_zone_id="Z0123456789ABC"),
        process_env,
    )
