"""Core modules for provlock - centralized definitions and utilities."""

from provlock.core.errors import (
    AliasNotFoundError,
    ConfigurationError,
    ExitCode,
    InstallError,
    InstallFailedError,
    MalformedLockError,
    MalformedManifestError,
    ProviderError,
    ProvlockError,
    RegistryError,
    UnresolvedProviderError,
    format_error_message,
    main_with_error_handling,
)

__all__ = [
    "ExitCode",
    "ProvlockError",
    "ConfigurationError",
    "MalformedManifestError",
    "MalformedLockError",
    "ProviderError",
    "RegistryError",
    "UnresolvedProviderError",
    "InstallError",
    "InstallFailedError",
    "AliasNotFoundError",
    "main_with_error_handling",
    "format_error_message",
]
