"""
Application settings using Pydantic.

Provides environment-based configuration loading with PROVLOCK_ prefix.
"""

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

DEFAULT_NAMESPACE_PREFIXES = ["@sst-provider/", "@pulumi/", ""]


class Settings(BaseSettings):
    """Application settings."""

    # Declaration file holding the ``providers`` mapping
    config_path: Path = Path("provlock.yaml")

    # Directory holding package.json, node_modules and the generated files
    platform_dir: Path = Path(".provlock/platform")

    # Registry
    registry_url: str = "https://registry.npmjs.org"
    http_timeout: float = 30.0
    namespace_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_NAMESPACE_PREFIXES)
    )

    # Installer
    installer: str = "bun"
    fallback_installer: str = "npm"
    # Any non-empty value switches to the fallback installer
    no_bun: str = Field(
        default="",
        validation_alias=AliasChoices("no_bun", "PROVLOCK_NO_BUN", "NO_BUN"),
    )

    # Generated files, relative to platform_dir
    lock_filename: str = "provider-lock.json"
    manifest_filename: str = "package.json"
    types_filename: str = "config.d.ts"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "PROVLOCK_"
        populate_by_name = True

    @property
    def resolved_installer(self) -> str:
        """Installer executable after applying the fallback toggle."""
        if self.no_bun:
            return self.fallback_installer
        return self.installer

    @property
    def lock_path(self) -> Path:
        return self.platform_dir / self.lock_filename

    @property
    def manifest_path(self) -> Path:
        return self.platform_dir / self.manifest_filename

    @property
    def types_path(self) -> Path:
        return self.platform_dir / self.types_filename
