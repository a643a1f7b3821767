"""Default paths, environment variable names, and constants."""

from __future__ import annotations

import platformdirs

APP_NAME = "smtp-infra"
APP_AUTHOR = "smtp-server"

CONFIG_DIR = platformdirs.user_config_path(APP_NAME, APP_AUTHOR)
CONTEXT_FILE = CONFIG_DIR / "context.toml"

# Environment variable names
ENV_ENVIRONMENT = "ENVIRONMENT"
ENV_KEY_PAIR_NAME = "KEY_PAIR_NAME"
ENV_DOMAIN_NAME = "DOMAIN_NAME"
ENV_HOSTED_ZONE_ID = "HOSTED_ZONE_ID"
ENV_ACCOUNT = "CDK_DEFAULT_ACCOUNT"
ENV_REGION = "CDK_DEFAULT_REGION"
ENV_STRICT_VALIDATION = "STRICT_VALIDATION"
ENV_SSM_ACCESS = "SSM_ACCESS"
ENV_GIT_REPOSITORY = "SMTP_GIT_REPOSITORY"

TRUTHY_VALUES = frozenset({"1", "true", "yes", "on"})

DEFAULT_ENVIRONMENT = "dev"

# Tagging
PROJECT_LABEL = "SMTP Server"
MANAGED_BY_LABEL = "CDK"

# Network
VPC_CIDR = "10.0.0.0/16"
SUBNET_CIDR_MASK = 24
ANY_IPV4 = "0.0.0.0/0"
SSH_PORT = 22

# Public mail, web and websocket ports, in rule order
PUBLIC_PORTS: dict[str, int] = {
    "smtp": 25,
    "smtps": 465,
    "submission": 587,
    "imap": 143,
    "imaps": 993,
    "pop3": 110,
    "pop3s": 995,
    "http": 80,
    "https": 443,
    "websocket": 8080,
    "websocket-secure": 8443,
}

# Values shipped as placeholders that must be replaced before a real deploy
PLACEHOLDER_SENTINELS = ("YOUR_OFFICE_IP", "yourusername")

DEFAULT_GIT_REPOSITORY = "https://github.com/yourusername/smtp-server.git"

# Policy defaults for the mail domain when nothing else supplies one
POLICY_DOMAINS: dict[str, str] = {
    "staging": "smtp-staging.example.com",
    "production": "mail.example.com",
}

# Monitoring
DISK_USAGE_THRESHOLD = 85
STATUS_CHECK_EVALUATION_PERIODS = 2

# Secrets
SECRET_PASSWORD_LENGTH = 32
SECRET_GENERATED_KEY = "admin_password"

# DNS
DNS_TTL_SECONDS = 300
MX_PRIORITY = 10

# Backups
BACKUP_SCHEDULE = "cron(0 5 * * ? *)"
