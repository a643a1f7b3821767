"""Typed exceptions and error handling decorator."""

from __future__ import annotations

import functools
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from rich.console import Console

from smtp_infra.log import get_logger

if TYPE_CHECKING:
    from smtp_infra.models.validation import ValidationIssue

F = TypeVar("F", bound=Callable[..., Any])

err_console = Console(stderr=True)
logger = get_logger(__name__)


class SmtpInfraError(Exception):
    """Base exception for smtp-infra."""

    exit_code: int = 1


class UnknownEnvironment(SmtpInfraError):
    """The requested environment has no registry entry."""

    exit_code = 2

    def __init__(self, name: str, known: Sequence[str] = ()) -> None:
        self.name = name
        msg = f"Unknown environment '{name}'"
        if known:
            msg += f" (expected one of: {', '.join(known)})"
        super().__init__(msg)


class ConfigValidationError(SmtpInfraError):
    """Strict validation found at least one error-severity issue."""

    exit_code = 3

    def __init__(self, issues: Sequence[ValidationIssue]) -> None:
        self.issues = tuple(issues)
        errors = [i for i in self.issues if i.severity == "error"]
        super().__init__(
            f"Configuration failed validation with {len(errors)} error(s)"
        )


class MissingAccessError(SmtpInfraError):
    """No administrative access path is configured for the server."""

    exit_code = 4

    def __init__(self, environment: str) -> None:
        self.environment = environment
        super().__init__(
            f"No administrative access configured for '{environment}'. "
            "Set a key pair (--key-pair or KEY_PAIR_NAME) or enable "
            "Session Manager access (--session-manager or SSM_ACCESS=true)."
        )


class ConfigurationError(SmtpInfraError):
    """Invalid input supplied to the resolver or the context store."""

    exit_code = 5


def error_handler(func: F) -> F:
    """Decorator that catches SmtpInfraError and prints user-friendly messages."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except ConfigValidationError as exc:
            logger.debug("validation_failed", issues=len(exc.issues))
            err_console.print(f"[bold red]Error:[/] {exc}")
            for issue in exc.issues:
                err_console.print(f"  {issue.severity.upper()} {issue.code}: {issue.message}")
            raise SystemExit(exc.exit_code)
        except SmtpInfraError as exc:
            logger.debug("command_failed", error_type=type(exc).__name__)
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(exc.exit_code)
        except ValueError as exc:
            err_console.print(f"[bold red]Error:[/] {exc}")
            raise SystemExit(1)

    return wrapper  # type: ignore[return-value]
