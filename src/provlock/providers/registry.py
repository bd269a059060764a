from __future__ import annotations

from typing import Sequence

import structlog

from provlock.core.errors import RegistryError, UnresolvedProviderError
from provlock.providers.base import PackageRegistry

logger = structlog.get_logger()

# First-party scope wins over the community scope, which wins over the bare name.
NAMESPACE_PREFIXES: tuple[str, ...] = ("@sst-provider/", "@pulumi/", "")


class RegistryResolver:
    """Maps a logical provider name onto a namespaced registry package."""

    def __init__(
        self,
        registry: PackageRegistry,
        prefixes: Sequence[str] = NAMESPACE_PREFIXES,
    ) -> None:
        if not prefixes:
            raise ValueError("At least one namespace prefix is required")
        self._registry = registry
        self._prefixes = tuple(prefixes)

    @property
    def prefixes(self) -> tuple[str, ...]:
        return self._prefixes

    async def resolve(self, name: str, version: str) -> str:
        """Return the package for ``name`` from the first namespace that has ``version``."""
        for prefix in self._prefixes:
            candidate = prefix + name
            try:
                package = await self._registry.get(candidate, version)
            except RegistryError as exc:
                logger.debug("registry_lookup_failed", candidate=candidate, error=exc.message)
                continue
            if package:
                logger.info("resolved_provider", name=name, package=package, version=version)
                return package
        raise UnresolvedProviderError(name, version)
