"""Tests for the context store."""

import pytest

from smtp_infra.config.manager import ContextManager
from smtp_infra.config.models import OverrideContext
from smtp_infra.errors import ConfigurationError, UnknownEnvironment


class TestContextManager:
    def test_load_empty(self, context_manager: ContextManager):
        assert context_manager.data.environments == {}
        assert context_manager.get_context("dev") == OverrideContext()

    def test_set_context(self, context_manager: ContextManager):
        context_manager.set_context("production", OverrideContext(key_pair_name="ops"))
        assert context_manager.get_context("production").key_pair_name == "ops"

    def test_set_merges(self, context_manager: ContextManager):
        context_manager.set_context("staging", OverrideContext(key_pair_name="ops"))
        context_manager.set_context("staging", OverrideContext(hosted_zone_id="Z1"))
        ctx = context_manager.get_context("staging")
        assert ctx.key_pair_name == "ops"
        assert ctx.hosted_zone_id == "Z1"

    def test_save_and_reload(self, context_manager: ContextManager):
        context_manager.set_context(
            "production",
            OverrideContext(ssh_cidrs=("203.0.113.0/24",), session_manager=True),
        )
        mgr2 = ContextManager(context_path=context_manager.context_path)
        ctx = mgr2.get_context("production")
        assert ctx.ssh_cidrs == ("203.0.113.0/24",)
        assert ctx.session_manager is True

    def test_file_is_owner_only(self, context_manager: ContextManager):
        context_manager.set_context("dev", OverrideContext(key_pair_name="ops"))
        mode = context_manager.context_path.stat().st_mode & 0o777
        assert mode == 0o600

    def test_clear_context(self, context_manager: ContextManager):
        context_manager.set_context("dev", OverrideContext(key_pair_name="ops"))
        assert context_manager.clear_context("dev") is True
        assert context_manager.get_context("dev") == OverrideContext()

    def test_clear_nonexistent(self, context_manager: ContextManager):
        assert context_manager.clear_context("dev") is False

    def test_unknown_environment(self, context_manager: ContextManager):
        with pytest.raises(UnknownEnvironment):
            context_manager.set_context("qa", OverrideContext(key_pair_name="ops"))

    def test_corrupt_file(self, context_manager: ContextManager):
        context_manager.context_path.write_text("environments = [not toml")
        with pytest.raises(ConfigurationError, match="Cannot read context file"):
            context_manager.get_context("dev")

    def test_unknown_environment_in_file(self, context_manager: ContextManager):
        context_manager.context_path.write_text('[environments.qa]\nkey_pair_name = "x"\n')
        with pytest.raises(UnknownEnvironment):
            context_manager.get_context("dev")
