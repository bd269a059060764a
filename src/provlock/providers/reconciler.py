"""
Lock reconciliation and install orchestration.

``LockReconciler`` compares the declared providers with the recorded lock and,
when they drift apart, rebuilds the lock from scratch:

1. resolve every provider concurrently against the registry
2. write the package manifest
3. run the installer and discover each provider's alias
4. write the type stubs
5. persist the new lock

Any failure aborts the install before step 5, so the lock file on disk always
describes the last install that fully succeeded.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import structlog

from provlock.clients.registry import NpmRegistryClient
from provlock.providers.base import ProviderSpec
from provlock.providers.driver import InstallDriver
from provlock.providers.lock import LockEntry, ProviderLock, load_lock, save_lock
from provlock.providers.registry import RegistryResolver
from provlock.providers.stubs import StubEmitter

if TYPE_CHECKING:
    from provlock.config.settings import Settings

logger = structlog.get_logger()


class ReconcileState(str, Enum):
    UNCHECKED = "unchecked"
    NEEDS_INSTALL = "needs_install"
    UP_TO_DATE = "up_to_date"
    RESOLVING = "resolving"
    INSTALLED = "installed"
    FAILED = "failed"


class LockReconciler:
    """Keeps the provider lock in step with the declared providers."""

    def __init__(
        self,
        specs: Iterable[ProviderSpec],
        *,
        resolver: RegistryResolver,
        driver: InstallDriver,
        emitter: StubEmitter,
        lock_path: Path | str,
        lock: ProviderLock | None = None,
    ) -> None:
        self.specs = list(specs)
        names = [spec.name for spec in self.specs]
        if len(names) != len(set(names)):
            raise ValueError("Provider names must be unique")
        self.resolver = resolver
        self.driver = driver
        self.emitter = emitter
        self.lock_path = Path(lock_path)
        self.lock = lock if lock is not None else ProviderLock()
        self.state = ReconcileState.UNCHECKED

    @classmethod
    def from_settings(cls, settings: Settings, specs: Iterable[ProviderSpec]) -> LockReconciler:
        """Wire the default collaborators and load the current lock."""
        client = NpmRegistryClient(settings.registry_url, timeout=settings.http_timeout)
        reconciler = cls(
            specs,
            resolver=RegistryResolver(client, settings.namespace_prefixes),
            driver=InstallDriver(settings.platform_dir, settings.resolved_installer),
            emitter=StubEmitter(settings.manifest_path, settings.types_path),
            lock_path=settings.lock_path,
        )
        reconciler.load()
        return reconciler

    def load(self) -> ProviderLock:
        self.lock = load_lock(self.lock_path)
        return self.lock

    def needs_install(self) -> bool:
        result = self._drifted()
        self.state = ReconcileState.NEEDS_INSTALL if result else ReconcileState.UP_TO_DATE
        return result

    def _drifted(self) -> bool:
        if len(self.specs) != len(self.lock):
            return True
        for spec in self.specs:
            entry = self.lock.get(spec.name)
            if entry is None:
                return True
            logger.info(
                "checking_provider",
                name=spec.name,
                version=spec.version,
                compare=entry.version,
            )
            if spec.version != entry.version:
                return True
        return False

    async def _resolve_one(self, spec: ProviderSpec, handoff: asyncio.Queue[LockEntry]) -> None:
        package = await self.resolver.resolve(spec.name, spec.version)
        await handoff.put(LockEntry(name=spec.name, package=package, version=spec.version))

    async def _collect(self, handoff: asyncio.Queue[LockEntry], expected: int) -> ProviderLock:
        lock = ProviderLock()
        for _ in range(expected):
            lock.append(await handoff.get())
        return lock

    async def resolve(self) -> ProviderLock:
        """Resolve every declared provider concurrently into a fresh lock.

        Entries appear in completion order. The first resolution failure is
        raised; siblings still in flight at that point are cancelled, since
        once the collector is gone a producer would otherwise wait forever
        on the size-one handoff.
        """
        self.state = ReconcileState.RESOLVING
        handoff: asyncio.Queue[LockEntry] = asyncio.Queue(maxsize=1)
        producers = [asyncio.create_task(self._resolve_one(spec, handoff)) for spec in self.specs]
        collector = asyncio.create_task(self._collect(handoff, len(self.specs)))

        pending: set[asyncio.Task] = {collector, *producers}
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_EXCEPTION)
                failures = [
                    task.exception()
                    for task in done
                    if not task.cancelled() and task.exception() is not None
                ]
                if failures:
                    raise failures[0]
        except BaseException:
            self.state = ReconcileState.FAILED
            raise
        finally:
            for task in pending:
                task.cancel()

        self.lock = collector.result()
        return self.lock

    async def install(self) -> ProviderLock:
        log = logger.bind(providers=len(self.specs), lock_path=str(self.lock_path))
        log.info("installing_deps")
        try:
            lock = await self.resolve()
            self.emitter.write_manifest(lock)
            await asyncio.to_thread(self.driver.fetch, lock)
            self.emitter.write_type_stubs(lock)
            save_lock(lock, self.lock_path)
        except Exception:
            self.state = ReconcileState.FAILED
            log.warning("install_failed")
            raise
        self.state = ReconcileState.INSTALLED
        log.info("install_complete")
        return lock

    async def ensure_installed(self, *, force: bool = False) -> bool:
        """Install when the lock has drifted (or ``force``); report whether it ran."""
        if not force and not self.needs_install():
            logger.info("providers_up_to_date", providers=len(self.specs))
            return False
        await self.install()
        return True
