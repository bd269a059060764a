"""Root test configuration."""

import asyncio
import json
import logging
import subprocess
from pathlib import Path

import pytest
import structlog
from provlock.core.errors import RegistryError
from provlock.providers.driver import InstallDriver
from provlock.providers.registry import RegistryResolver
from provlock.providers.stubs import StubEmitter


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


class FakeRegistry:
    """In-memory registry: ``available`` holds package names or (package, version) pairs."""

    def __init__(self, available=(), failing=(), delays=None):
        self.available = set(available)
        self.failing = set(failing)
        self.delays = delays or {}
        self.calls = []

    async def get(self, package, version):
        self.calls.append((package, version))
        delay = self.delays.get(package)
        if delay:
            await asyncio.sleep(delay)
        if package in self.failing:
            raise RegistryError(f"connection reset while fetching {package}")
        if package in self.available or (package, version) in self.available:
            return package
        return None


def write_artifact(platform_dir: Path, package: str, pulumi_type: str | None) -> Path:
    path = platform_dir / "node_modules" / package / "provider.js"
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [
        '"use strict";',
        "class Provider extends pulumi.ProviderResource {",
        "}",
        "exports.Provider = Provider;",
    ]
    if pulumi_type is not None:
        lines.append(f'Provider.__pulumiType = "{pulumi_type}";')
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def fake_registry():
    return FakeRegistry


@pytest.fixture
def platform_dir(tmp_path):
    platform = tmp_path / "platform"
    platform.mkdir()
    manifest = {
        "name": "platform",
        "private": True,
        "dependencies": {"@pulumi/pulumi": "3.112.0"},
    }
    (platform / "package.json").write_text(json.dumps(manifest, indent=2))
    return platform


@pytest.fixture
def fake_installer(platform_dir):
    """Stands in for ``bun install``: drops a provider.js per package passed in ``types``."""

    def factory(types, returncode=0, output="installed"):
        def run(cmd, **kwargs):
            if returncode == 0:
                for package, pulumi_type in types.items():
                    write_artifact(platform_dir, package, pulumi_type)
            return subprocess.CompletedProcess(cmd, returncode, stdout=output)

        return run

    return factory


@pytest.fixture
def make_components(platform_dir):
    def factory(registry):
        return {
            "resolver": RegistryResolver(registry),
            "driver": InstallDriver(platform_dir, installer="bun"),
            "emitter": StubEmitter(platform_dir / "package.json", platform_dir / "config.d.ts"),
            "lock_path": platform_dir / "provider-lock.json",
        }

    return factory


@pytest.fixture
def artifact(platform_dir):
    def factory(package, pulumi_type):
        return write_artifact(platform_dir, package, pulumi_type)

    return factory


@pytest.fixture(autouse=True)
def restore_structlog():
    """CLI entry points reconfigure structlog; put the quiet test config back."""
    config = structlog.get_config()
    yield
    structlog.configure(**config)
