"""Stack composer — turn a resolved configuration into resource specifications.

Composition walks ``COMPOSITION``, a fixed ordered table of
``(kind, include, build)`` entries. Each entry's predicate is evaluated once
against the configuration, so the output order never depends on which
optional resources are present and repeated runs diff cleanly.
"""

from __future__ import annotations

from typing import Any, Callable, NamedTuple

from smtp_infra.config.constants import (
    ANY_IPV4,
    BACKUP_SCHEDULE,
    DISK_USAGE_THRESHOLD,
    DNS_TTL_SECONDS,
    MX_PRIORITY,
    PUBLIC_PORTS,
    SECRET_GENERATED_KEY,
    SECRET_PASSWORD_LENGTH,
    SSH_PORT,
    STATUS_CHECK_EVALUATION_PERIODS,
    SUBNET_CIDR_MASK,
)
from smtp_infra.config.models import ResolvedConfig
from smtp_infra.errors import MissingAccessError
from smtp_infra.log import get_logger
from smtp_infra.models.resources import (
    DeploymentSpec,
    ResourceKind,
    ResourceSpec,
    StackOutput,
)
from smtp_infra.stack.validator import raise_for_issues, validate

logger = get_logger(__name__)

ACCOUNT_TOKEN = "${AWS::AccountId}"
MANAGED_POLICIES = ("CloudWatchAgentServerPolicy", "AmazonSSMManagedInstanceCore")


def _env(config: ResolvedConfig) -> str:
    return config.environment.value


def bucket_name(config: ResolvedConfig) -> str:
    """Object storage names are global, so scope by environment and account."""
    return f"smtp-server-emails-{_env(config)}-{config.account or ACCOUNT_TOKEN}"


def log_group_name(config: ResolvedConfig) -> str:
    return f"/aws/ec2/smtp-server-{_env(config)}"


def zone_name(domain_name: str) -> str:
    return ".".join(domain_name.split(".")[-2:])


# -- Predicates ---------------------------------------------------------------


def always(config: ResolvedConfig) -> bool:
    return True


def includes_monitoring(config: ResolvedConfig) -> bool:
    return config.monitoring_enabled


def includes_backup(config: ResolvedConfig) -> bool:
    return config.backups_enabled


def includes_dns(config: ResolvedConfig) -> bool:
    return config.dns_enabled


# -- Builders -----------------------------------------------------------------


def build_network(config: ResolvedConfig) -> ResourceSpec:
    return ResourceSpec(
        kind=ResourceKind.NETWORK,
        name=f"smtp-server-vpc-{_env(config)}",
        attributes={
            "cidr": config.vpc_cidr,
            "max_azs": config.max_azs,
            "nat_gateways": 0,
            "enable_dns_hostnames": True,
            "enable_dns_support": True,
            "subnets": [
                {"name": "Public", "type": "public", "cidr_mask": SUBNET_CIDR_MASK},
            ],
        },
    )


def build_compute(config: ResolvedConfig) -> ResourceSpec:
    env = _env(config)
    return ResourceSpec(
        kind=ResourceKind.COMPUTE,
        name=f"smtp-server-{env}",
        attributes={
            "instance_type": config.instance_class,
            "machine_image": "amazon-linux-2023",
            "subnet": "Public",
            "key_pair_name": config.key_pair_name,
            "session_manager": config.session_manager_enabled,
            "require_imdsv2": True,
            "detailed_monitoring": config.monitoring_enabled,
            "root_volume": {
                "device_name": "/dev/xvda",
                "size_gb": config.volume_size_gb,
                "volume_type": "gp3",
                "encrypted": True,
                "delete_on_termination": not config.is_production,
            },
            "role": {
                "name": f"smtp-server-role-{env}",
                "managed_policies": list(MANAGED_POLICIES),
                "grants": ["storage:read-write", "secret:read", "logs:write"],
            },
            "log_group": {
                "name": log_group_name(config),
                "retention_days": config.log_retention_days,
            },
            "bootstrap": {
                "repository_url": config.repository_url,
                "domain_name": config.domain_name or f"smtp-{env}.local",
            },
        },
    )


def build_security(config: ResolvedConfig) -> ResourceSpec:
    ingress: list[dict[str, Any]] = [
        {
            "protocol": "tcp",
            "port": SSH_PORT,
            "source": cidr,
            "description": f"SSH access from {cidr}",
        }
        for cidr in config.allowed_ssh_cidrs
    ]
    ingress.extend(
        {"protocol": "tcp", "port": port, "source": ANY_IPV4, "description": service}
        for service, port in PUBLIC_PORTS.items()
    )
    return ResourceSpec(
        kind=ResourceKind.SECURITY,
        name=f"smtp-server-sg-{_env(config)}",
        attributes={"allow_all_outbound": True, "ingress": ingress},
    )


def build_storage(config: ResolvedConfig) -> ResourceSpec:
    production = config.is_production
    return ResourceSpec(
        kind=ResourceKind.STORAGE,
        name=bucket_name(config),
        attributes={
            "versioned": True,
            "encryption": "s3-managed",
            "block_public_access": True,
            "removal_policy": "retain" if production else "destroy",
            "auto_delete_objects": not production,
            "lifecycle_rules": [
                {
                    "id": "TransitionToIA",
                    "transitions": [
                        {
                            "storage_class": "INFREQUENT_ACCESS",
                            "after_days": config.lifecycle.transition_to_ia_days,
                        },
                        {
                            "storage_class": "GLACIER",
                            "after_days": config.lifecycle.transition_to_glacier_days,
                        },
                    ],
                },
            ],
        },
    )


def build_secret(config: ResolvedConfig) -> ResourceSpec:
    return ResourceSpec(
        kind=ResourceKind.SECRET,
        name=f"smtp-server-credentials-{_env(config)}",
        attributes={
            "description": "SMTP server credentials and secrets",
            "template": {"environment": _env(config)},
            "generate_key": SECRET_GENERATED_KEY,
            "password_length": SECRET_PASSWORD_LENGTH,
            "exclude_punctuation": True,
        },
    )


def build_monitoring(config: ResolvedConfig) -> ResourceSpec:
    env = _env(config)
    periods = config.alarms.evaluation_periods
    return ResourceSpec(
        kind=ResourceKind.MONITORING,
        name=f"smtp-server-alarms-{env}",
        attributes={
            "alarms": [
                {
                    "name": f"smtp-server-cpu-{env}",
                    "metric": "CPUUtilization",
                    "comparison": "GreaterThanThreshold",
                    "threshold": config.alarms.cpu_threshold,
                    "evaluation_periods": periods,
                    "datapoints_to_alarm": periods,
                    "treat_missing_data": "notBreaching",
                },
                {
                    "name": f"smtp-server-status-{env}",
                    "metric": "StatusCheckFailed",
                    "comparison": "GreaterThanOrEqualToThreshold",
                    "threshold": 1,
                    "evaluation_periods": STATUS_CHECK_EVALUATION_PERIODS,
                    "datapoints_to_alarm": STATUS_CHECK_EVALUATION_PERIODS,
                    "treat_missing_data": "notBreaching",
                },
                {
                    "name": f"smtp-server-disk-{env}",
                    "metric": "disk_used_percent",
                    "comparison": "GreaterThanThreshold",
                    "threshold": DISK_USAGE_THRESHOLD,
                    "evaluation_periods": periods,
                    "datapoints_to_alarm": periods,
                    "treat_missing_data": "notBreaching",
                },
            ],
        },
    )


def build_backup(config: ResolvedConfig) -> ResourceSpec:
    env = _env(config)
    return ResourceSpec(
        kind=ResourceKind.BACKUP,
        name=f"smtp-server-backup-{env}",
        attributes={
            "vault": f"smtp-server-vault-{env}",
            "schedule": BACKUP_SCHEDULE,
            "retention_days": 30 if config.is_production else 7,
            "targets": [f"smtp-server-{env}"],
        },
    )


def build_dns(config: ResolvedConfig) -> ResourceSpec:
    domain = config.domain_name or ""
    return ResourceSpec(
        kind=ResourceKind.DNS,
        name=domain,
        attributes={
            "hosted_zone_id": config.hosted_zone_id,
            "zone_name": zone_name(domain),
            "records": [
                {
                    "type": "A",
                    "name": domain,
                    "target": "instance-public-ip",
                    "ttl": DNS_TTL_SECONDS,
                },
                {
                    "type": "MX",
                    "name": domain,
                    "values": [{"host": domain, "priority": MX_PRIORITY}],
                    "ttl": DNS_TTL_SECONDS,
                },
            ],
        },
    )


class Component(NamedTuple):
    kind: ResourceKind
    include: Callable[[ResolvedConfig], bool]
    build: Callable[[ResolvedConfig], ResourceSpec]


COMPOSITION: tuple[Component, ...] = (
    Component(ResourceKind.NETWORK, always, build_network),
    Component(ResourceKind.COMPUTE, always, build_compute),
    Component(ResourceKind.SECURITY, always, build_security),
    Component(ResourceKind.STORAGE, always, build_storage),
    Component(ResourceKind.SECRET, always, build_secret),
    Component(ResourceKind.MONITORING, includes_monitoring, build_monitoring),
    Component(ResourceKind.BACKUP, includes_backup, build_backup),
    Component(ResourceKind.DNS, includes_dns, build_dns),
)


def build_outputs(config: ResolvedConfig) -> tuple[StackOutput, ...]:
    """Declare the identifiers the provisioning backend should report."""
    env = _env(config)
    if config.key_pair_name:
        ssh_hint = f"ssh -i ~/.ssh/{config.key_pair_name}.pem ec2-user@<public-ip>"
    else:
        ssh_hint = "No key pair specified - use AWS Systems Manager Session Manager"
    return (
        StackOutput(key="InstanceId", description="EC2 Instance ID",
                    export_name=f"SmtpInstanceId-{env}"),
        StackOutput(key="PublicIp", description="Public IP address",
                    export_name=f"SmtpPublicIp-{env}"),
        StackOutput(key="PublicDnsName", description="Public DNS name",
                    export_name=f"SmtpPublicDns-{env}"),
        StackOutput(key="BucketName", description="S3 bucket for email storage",
                    export_name=f"SmtpBucketName-{env}"),
        StackOutput(key="SecretArn", description="Secrets Manager ARN for credentials",
                    export_name=f"SmtpSecretArn-{env}"),
        StackOutput(key="SecurityGroupId", description="Security Group ID",
                    export_name=f"SmtpSecurityGroupId-{env}"),
        StackOutput(key="LogGroupName", description="CloudWatch log group",
                    value=log_group_name(config)),
        StackOutput(key="SshCommand", description="SSH command to connect to the instance",
                    value=ssh_hint),
    )


def compose(config: ResolvedConfig, *, strict: bool = False) -> DeploymentSpec:
    """Compose the deployment specification for *config*.

    Under ``strict`` the configuration is validated first and any
    error-severity issue raises ``ConfigValidationError``. Raises
    ``MissingAccessError`` when neither a key pair nor Session Manager
    access is configured.
    """
    if strict:
        raise_for_issues(validate(config, strict=True))
    if not config.has_admin_access:
        raise MissingAccessError(_env(config))

    resources = tuple(
        component.build(config)
        for component in COMPOSITION
        if component.include(config)
    )
    logger.debug(
        "stack_composed",
        environment=_env(config),
        kinds=[r.kind.value for r in resources],
    )
    return DeploymentSpec(
        stack_name=f"smtp-server-{_env(config)}",
        description=f"SMTP Server {config.environment.cost_center} Environment",
        config=config,
        resources=resources,
        outputs=build_outputs(config),
    )
