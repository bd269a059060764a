from provlock.clients.registry import NpmRegistryClient

__all__ = ["NpmRegistryClient"]
