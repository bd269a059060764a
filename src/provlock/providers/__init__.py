"""Provider resolution, locking and install orchestration."""

from provlock.providers.base import LATEST, PackageRegistry, ProviderSpec
from provlock.providers.driver import InstallDriver, derive_alias
from provlock.providers.lock import LockEntry, ProviderLock, load_lock, save_lock
from provlock.providers.reconciler import LockReconciler, ReconcileState
from provlock.providers.registry import NAMESPACE_PREFIXES, RegistryResolver
from provlock.providers.stubs import StubEmitter, render_type_stubs

__all__ = [
    "LATEST",
    "NAMESPACE_PREFIXES",
    "InstallDriver",
    "LockEntry",
    "LockReconciler",
    "PackageRegistry",
    "ProviderLock",
    "ProviderSpec",
    "ReconcileState",
    "RegistryResolver",
    "StubEmitter",
    "derive_alias",
    "load_lock",
    "render_type_stubs",
    "save_lock",
]
