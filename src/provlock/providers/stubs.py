from __future__ import annotations

import json
from pathlib import Path

import structlog

from provlock.core.errors import MalformedManifestError
from provlock.providers.lock import ProviderLock, atomic_write

logger = structlog.get_logger()

STUB_HEADER = (
    'import "./src/global.d.ts"',
    'import "../types.generated"',
    'import { AppInput, App, Config } from "./src/config"',
)


def render_type_stubs(lock: ProviderLock) -> str:
    """Render the ``config.d.ts`` declarations for every locked provider."""
    lines = list(STUB_HEADER)
    for entry in lock:
        lines.append(f'import * as _{entry.alias} from "{entry.package}";')
    lines.extend(["", "", "declare global {"])
    for entry in lock:
        lines.append("  // @ts-expect-error")
        lines.append(f"  export import {entry.alias} = _{entry.alias}")
    lines.append("  interface Providers {")
    lines.append("    providers?: {")
    for entry in lock:
        lines.append(
            f'      "{entry.name}"?:  (_{entry.alias}.ProviderArgs & {{ version?: string }}) | boolean;'
        )
    lines.extend(
        [
            "    }",
            "  }",
            "  export const $config: (",
            '    input: Omit<Config, "app"> & {',
            '      app(input: AppInput): Omit<App, "providers"> & Providers;',
            "    },",
            "  ) => Config;",
            "}",
        ]
    )
    return "\n".join(lines) + "\n"


class StubEmitter:
    """Writes the package manifest and the generated type declarations."""

    def __init__(
        self,
        manifest_path: Path | str,
        types_path: Path | str,
    ) -> None:
        self.manifest_path = Path(manifest_path)
        self.types_path = Path(types_path)

    def _read_manifest(self) -> dict:
        try:
            data = json.loads(self.manifest_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise MalformedManifestError(
                f"Failed to read manifest: {exc}",
                details={"path": str(self.manifest_path)},
            ) from exc
        if not isinstance(data, dict) or not isinstance(data.get("dependencies"), dict):
            raise MalformedManifestError(
                "Manifest has no 'dependencies' object",
                details={"path": str(self.manifest_path)},
            )
        return data

    def write_manifest(self, lock: ProviderLock) -> None:
        logger.info("writing_manifest", path=str(self.manifest_path))
        manifest = self._read_manifest()
        dependencies = manifest["dependencies"]
        for entry in lock:
            logger.debug("adding_dependency", name=entry.name, package=entry.package)
            dependencies[entry.package] = entry.version
        atomic_write(
            self.manifest_path,
            json.dumps(manifest, indent=2, ensure_ascii=False) + "\n",
        )

    def write_type_stubs(self, lock: ProviderLock) -> None:
        logger.info("writing_types", path=str(self.types_path))
        atomic_write(self.types_path, render_type_stubs(lock))
