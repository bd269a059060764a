"""
Unified error handling for provlock.

Every failure raised while resolving, installing or persisting providers is a
``ProvlockError`` subclass carrying the exit code the CLI reports.

Exit Codes:
- 0: Success
- 1: Warning (lock is stale, install needed)
- 10: Configuration error (declaration, manifest or lock file unusable)
- 11: Provider error (registry lookup failed)
- 13: Install error (installer subprocess or alias discovery failed)
- 127: Unknown/internal error
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    WARNING = 1
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    INSTALL_ERROR = 13
    UNKNOWN_ERROR = 127


class ProvlockError(Exception):
    """Base exception for provlock errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(ProvlockError):
    """Raised for configuration-related errors."""

    exit_code = ExitCode.CONFIG_ERROR


class MalformedManifestError(ConfigurationError):
    """The package manifest is missing, unparsable or lacks ``dependencies``."""


class MalformedLockError(ConfigurationError):
    """The provider lock file exists but cannot be parsed."""


class ProviderError(ProvlockError):
    """Raised when a provider cannot be looked up in the registry."""

    exit_code = ExitCode.PROVIDER_ERROR


class RegistryError(ProviderError):
    """Transport or HTTP failure talking to the package registry."""


class UnresolvedProviderError(ProviderError):
    """No namespace prefix matched the provider at the requested version."""

    def __init__(self, name: str, version: str):
        super().__init__(
            f"provider {name} not found",
            details={"provider": name, "version": version},
        )
        self.name = name
        self.version = version


class InstallError(ProvlockError):
    """Raised when materializing the resolved packages fails."""

    exit_code = ExitCode.INSTALL_ERROR


class InstallFailedError(InstallError):
    """The installer subprocess exited non-zero; ``output`` is kept verbatim."""

    def __init__(self, installer: str, output: str, returncode: int | None = None):
        super().__init__(
            f"failed to run {installer} install {output}",
            details={"installer": installer, "returncode": returncode},
        )
        self.installer = installer
        self.output = output
        self.returncode = returncode


class AliasNotFoundError(InstallError):
    """The installed artifact carries no ``__pulumiType`` marker."""

    def __init__(self, package: str, reason: str | None = None):
        details: dict[str, Any] = {"package": package}
        if reason:
            details["reason"] = reason
        super().__init__(f"failed to find __pulumiType for {package}", details=details)
        self.package = package


# Type variable for decorated functions
F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI main functions that provides unified error handling.

    Catches exceptions and converts them to appropriate exit codes with
    consistent error reporting.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - ProvlockError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except ProvlockError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                _print_error(format_error_message(e))
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130  # Standard exit code for SIGINT
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: ProvlockError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg


def _print_error(message: str) -> None:
    from provlock.cli.ux import error as print_error

    print_error(message)
