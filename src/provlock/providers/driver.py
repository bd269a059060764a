"""
Installer subprocess integration and alias discovery.

After ``<installer> install`` has materialized every locked package under
``node_modules``, each package's ``provider.js`` is scanned for the
``Provider.__pulumiType`` marker; its value, minus hyphens, becomes the alias
the provider's types are re-exported under.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path

import structlog

from provlock.core.errors import AliasNotFoundError, InstallFailedError
from provlock.providers.lock import ProviderLock

logger = structlog.get_logger()

PULUMI_TYPE_PATTERN = re.compile(r"""Provider\.__pulumiType = ['"]([^'"]+)['"]""")
ARTIFACT_FILENAME = "provider.js"


def derive_alias(pulumi_type: str) -> str:
    """``my-cool-thing`` -> ``mycoolthing``."""
    return pulumi_type.replace("-", "")


def find_pulumi_type(path: Path) -> str | None:
    """Return the first ``__pulumiType`` literal in ``path``, or None."""
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            match = PULUMI_TYPE_PATTERN.search(line)
            if match:
                return match.group(1)
    return None


class InstallDriver:
    """Runs the package installer and fills in each lock entry's alias."""

    def __init__(self, platform_dir: Path | str, installer: str = "bun") -> None:
        self.platform_dir = Path(platform_dir)
        self.installer = installer

    def fetch(self, lock: ProviderLock) -> None:
        self.run_installer()
        self.discover_aliases(lock)

    def run_installer(self) -> str:
        """Run ``<installer> install``; return its combined output."""
        logger.info("running_installer", installer=self.installer, cwd=str(self.platform_dir))
        try:
            result = subprocess.run(
                [self.installer, "install"],
                cwd=self.platform_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            raise InstallFailedError(self.installer, str(exc)) from exc

        output = result.stdout or ""
        if result.returncode != 0:
            raise InstallFailedError(self.installer, output, result.returncode)
        return output

    def artifact_path(self, package: str) -> Path:
        return self.platform_dir / "node_modules" / package / ARTIFACT_FILENAME

    def discover_aliases(self, lock: ProviderLock) -> None:
        for entry in lock:
            path = self.artifact_path(entry.package)
            try:
                pulumi_type = find_pulumi_type(path)
            except OSError as exc:
                raise AliasNotFoundError(entry.package, reason=str(exc)) from exc
            alias = derive_alias(pulumi_type) if pulumi_type else ""
            if not alias:
                raise AliasNotFoundError(entry.package)
            entry.alias = alias
            logger.debug("discovered_alias", package=entry.package, alias=entry.alias)
