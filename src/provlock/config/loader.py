"""
Provider declaration loading.

The declaration is a YAML (or JSON) document with a top-level ``providers``
mapping, e.g.::

    providers:
      aws: {}
      cloudflare:
        version: 5.2.0
      random: "4.16.0"

A provider set to ``false`` is disabled and left out of the result.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml

from provlock.core.errors import ConfigurationError
from provlock.providers.base import ProviderSpec

logger = structlog.get_logger()


def parse_declaration(data: Any) -> list[ProviderSpec]:
    """Turn a parsed declaration document into provider specs."""
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ConfigurationError("Declaration must be a mapping")

    providers = data.get("providers") or {}
    if not isinstance(providers, dict):
        raise ConfigurationError("'providers' must be a mapping of name to config")

    specs: list[ProviderSpec] = []
    for name, config in providers.items():
        if config is False:
            logger.debug("provider_disabled", name=name)
            continue
        try:
            specs.append(ProviderSpec.from_config(str(name), config))
        except TypeError as exc:
            raise ConfigurationError(str(exc), details={"provider": name}) from exc
    return specs


def load_declaration(path: str | Path) -> list[ProviderSpec]:
    """Load provider specs from a declaration file."""
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(
            f"Declaration file not found: {path}", details={"path": str(path)}
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(
            f"Failed to parse declaration: {exc}", details={"path": str(path)}
        ) from exc

    specs = parse_declaration(data)
    logger.debug("loaded_declaration", path=str(path), providers=len(specs))
    return specs
