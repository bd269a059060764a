from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

LATEST = "latest"


@dataclass(frozen=True)
class ProviderSpec:
    """A provider as declared in the project configuration."""

    name: str
    version_selector: str | None = None

    @property
    def version(self) -> str:
        """Version selector with absent/empty normalized to ``latest``."""
        return self.version_selector or LATEST

    @classmethod
    def from_config(cls, name: str, config: Any) -> ProviderSpec:
        """Build a spec from a declaration value.

        Accepts a mapping with an optional ``version`` key, a bare version
        string, or ``True``/``None`` for the latest release.
        """
        if isinstance(config, Mapping):
            version = config.get("version")
        elif isinstance(config, str):
            version = config
        elif config is None or config is True:
            version = None
        else:
            raise TypeError(f"Unsupported declaration for provider '{name}': {config!r}")
        if version is not None and not isinstance(version, str):
            raise TypeError(
                f"Version for provider '{name}' must be a string; "
                f"quote it in the declaration (got {version!r})"
            )
        return cls(name=name, version_selector=version or None)


class PackageRegistry(Protocol):
    """Registry collaborator queried once per (prefix, name) pair."""

    async def get(self, package: str, version: str) -> str | None:
        """Return the registry's package name if ``package@version`` exists."""
        ...
