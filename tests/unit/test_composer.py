"""Tests for stack composition."""

from __future__ import annotations

import pytest

from smtp_infra.config.models import OverrideContext, ResolvedConfig
from smtp_infra.config.resolver import resolve
from smtp_infra.errors import ConfigValidationError, MissingAccessError
from smtp_infra.models.resources import ResourceKind
from smtp_infra.stack.composer import (
    COMPOSITION,
    compose,
    includes_backup,
    includes_dns,
    includes_monitoring,
    zone_name,
)

K = ResourceKind


class TestOrdering:
    def test_dev_kinds(self, dev_config: ResolvedConfig):
        spec = compose(dev_config)
        assert spec.kinds == [K.NETWORK, K.COMPUTE, K.SECURITY, K.STORAGE, K.SECRET]

    def test_production_kinds(self, production_config: ResolvedConfig):
        spec = compose(production_config)
        assert spec.kinds == [
            K.NETWORK, K.COMPUTE, K.SECURITY, K.STORAGE, K.SECRET,
            K.MONITORING, K.BACKUP, K.DNS,
        ]

    def test_composition_table_order(self):
        assert [c.kind for c in COMPOSITION] == list(ResourceKind)

    def test_idempotent(self, production_config: ResolvedConfig):
        first = compose(production_config)
        second = compose(production_config)
        assert first.kinds == second.kinds
        assert first.model_dump_json() == second.model_dump_json()

    def test_carries_config(self, dev_config: ResolvedConfig):
        spec = compose(dev_config)
        assert spec.config == dev_config
        assert spec.stack_name == "smtp-server-dev"
        assert spec.description == "SMTP Server Development Environment"


class TestPredicates:
    def test_monitoring(self, dev_config: ResolvedConfig, production_config: ResolvedConfig):
        assert includes_monitoring(dev_config) is False
        assert includes_monitoring(production_config) is True

    def test_backup(self, dev_config: ResolvedConfig, production_config: ResolvedConfig):
        assert includes_backup(dev_config) is False
        assert includes_backup(production_config) is True

    def test_dns_requires_both(self, process_env):
        assert includes_dns(resolve("staging", {}, process_env)) is False
        assert includes_dns(resolve("staging", {"hostedZoneId": "Z1"}, process_env)) is True
        assert includes_dns(resolve("dev", {"hostedZoneId": "Z1"}, process_env)) is False

    def test_dns_absent_for_dev(self, dev_config: ResolvedConfig):
        assert compose(dev_config).get(K.DNS) is None

    def test_dns_present_when_overridden_in_dev(self, process_env):
        config = resolve("dev", {"domainName": "mail.acme.io", "hostedZoneId": "Z1"}, process_env)
        dns = compose(config).get(K.DNS)
        assert dns is not None
        assert dns.attributes["zone_name"] == "acme.io"
        record_types = [r["type"] for r in dns.attributes["records"]]
        assert record_types == ["A", "MX"]
        assert dns.attributes["records"][1]["values"][0]["priority"] == 10

    def test_monitoring_toggle(self, production_config: ResolvedConfig):
        config = production_config.model_copy(update={"monitoring_enabled": False})
        assert K.MONITORING not in compose(config).kinds


class TestResources:
    def test_security_ports(self, production_config: ResolvedConfig):
        sg = compose(production_config).get(K.SECURITY)
        assert sg is not None
        rules = sg.attributes["ingress"]
        ssh = [r for r in rules if r["port"] == 22]
        assert [r["source"] for r in ssh] == ["203.0.113.0/24"]
        public = {r["port"] for r in rules if r["source"] == "0.0.0.0/0"}
        assert public == {25, 465, 587, 143, 993, 110, 995, 80, 443, 8080, 8443}

    def test_compute_sizing(self, production_config: ResolvedConfig):
        compute = compose(production_config).get(K.COMPUTE)
        assert compute is not None
        assert compute.attributes["instance_type"] == "t3.large"
        assert compute.attributes["root_volume"]["size_gb"] == 100
        assert compute.attributes["root_volume"]["delete_on_termination"] is False
        assert compute.attributes["log_group"]["name"] == "/aws/ec2/smtp-server-production"

    def test_storage_name_scoped_by_account(self, dev_config: ResolvedConfig):
        storage = compose(dev_config).get(K.STORAGE)
        assert storage is not None
        assert storage.name == "smtp-server-emails-dev-123456789012"
        assert storage.attributes["removal_policy"] == "destroy"

    def test_storage_without_account_uses_token(self):
        config = resolve("dev", {"keyPairName": "k"}, {})
        storage = compose(config).get(K.STORAGE)
        assert storage is not None
        assert storage.name.endswith("${AWS::AccountId}")

    def test_production_storage_retained(self, production_config: ResolvedConfig):
        storage = compose(production_config).get(K.STORAGE)
        assert storage is not None
        assert storage.attributes["removal_policy"] == "retain"
        assert storage.attributes["auto_delete_objects"] is False

    def test_monitoring_alarms(self, production_config: ResolvedConfig):
        monitoring = compose(production_config).get(K.MONITORING)
        assert monitoring is not None
        alarms = {a["metric"]: a for a in monitoring.attributes["alarms"]}
        assert alarms["CPUUtilization"]["threshold"] == 80
        assert alarms["CPUUtilization"]["evaluation_periods"] > 1
        assert alarms["StatusCheckFailed"]["threshold"] == 1
        assert alarms["disk_used_percent"]["threshold"] == 85

    def test_secret(self, dev_config: ResolvedConfig):
        secret = compose(dev_config).get(K.SECRET)
        assert secret is not None
        assert secret.name == "smtp-server-credentials-dev"
        assert secret.attributes["password_length"] == 32

    def test_untagged(self, dev_config: ResolvedConfig):
        assert all(r.tags == {} for r in compose(dev_config).resources)

    def test_outputs_ssh_hint(self, dev_config: ResolvedConfig):
        outputs = {o.key: o for o in compose(dev_config).outputs}
        assert outputs["SshCommand"].value.startswith("ssh -i ~/.ssh/smtp-ops.pem")
        assert outputs["InstanceId"].export_name == "SmtpInstanceId-dev"


class TestAccessAndStrict:
    def test_missing_access(self):
        config = resolve("dev", {}, {})
        with pytest.raises(MissingAccessError, match="No administrative access"):
            compose(config)

    def test_session_manager_is_access(self):
        config = resolve("dev", OverrideContext(session_manager=True), {})
        spec = compose(config)
        assert spec.get(K.COMPUTE).attributes["session_manager"] is True
        outputs = {o.key: o for o in spec.outputs}
        assert "Session Manager" in outputs["SshCommand"].value

    def test_strict_raises_before_composing(self, process_env):
        config = resolve("production", {}, process_env)
        with pytest.raises(ConfigValidationError) as exc_info:
            compose(config, strict=True)
        codes = [i.code for i in exc_info.value.issues]
        assert "ssh-open-to-world" in codes

    def test_advisory_composes_same_config(self, process_env):
        config = resolve("production", {}, process_env)
        spec = compose(config, strict=False)
        assert spec.kinds[:5] == [K.NETWORK, K.COMPUTE, K.SECURITY, K.STORAGE, K.SECRET]

    def test_strict_clean_composes(self, production_config: ResolvedConfig):
        assert len(compose(production_config, strict=True).resources) == 8


def test_zone_name():
    assert zone_name("mail.example.com") == "example.com"
    assert zone_name("example.com") == "example.com"
