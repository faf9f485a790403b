from typing import Any, Callable, Dict, Hashable, Optional

from miraveja_scan.domain import (
    DIException,
    ILifetimeManager,
    Lifetime,
    Mapping,
    UnresolvableError,
)


class LifetimeManager(ILifetimeManager):
    """Manages instance lifetimes for singleton, transient, and scoped mappings.

    Instances are cached per mapping rather than per service type, so several
    mappings appended for the same service keep separate instances.

    Attributes:
        _singleton_cache: Cache for singleton instances, shared with child scopes.
        _scoped_cache: Cache for scoped instances of this container only.
    """

    def __init__(self, parent_singleton_cache: Optional[Dict[Hashable, Any]] = None) -> None:
        """Initialize the lifetime manager with empty caches.

        Args:
            parent_singleton_cache: Singleton cache of the root container when this
                manager belongs to a scope.
        """
        if parent_singleton_cache is not None:
            self._singleton_cache: Dict[Hashable, Any] = parent_singleton_cache
        else:
            self._singleton_cache = {}
        self._scoped_cache: Dict[Hashable, Any] = {}

    def get_or_create(
        self,
        mapping: Mapping,
        factory: Callable[[], Any],
        cache_key: Optional[Hashable] = None,
    ) -> Any:
        """Get existing instance or create new one based on the mapping lifetime.

        Args:
            mapping: The mapping being resolved.
            factory: Function to create a new instance if needed.
            cache_key: Key to cache under, defaults to ``mapping.key``. Open generic
                mappings pass one key per closed type.

        Returns:
            Instance according to lifetime rules:
            - Singleton: Returns cached instance or creates and caches new one
            - Transient: Always creates new instance
            - Scoped: Returns cached instance within scope or creates new one
        """
        key = cache_key if cache_key is not None else mapping.key

        if mapping.lifetime == Lifetime.SINGLETON:
            if key not in self._singleton_cache:
                self._singleton_cache[key] = self._create(mapping, factory)
            return self._singleton_cache[key]

        if mapping.lifetime == Lifetime.SCOPED:
            if key not in self._scoped_cache:
                self._scoped_cache[key] = self._create(mapping, factory)
            return self._scoped_cache[key]

        return self._create(mapping, factory)

    @staticmethod
    def _create(mapping: Mapping, factory: Callable[[], Any]) -> Any:
        try:
            return factory()
        except DIException:
            raise
        except Exception as e:
            raise UnresolvableError(mapping.service_type, f"Failed to create instance: {str(e)}") from e

    def clear_cache(self) -> None:
        """Clear all cached instances (singletons and scoped)."""
        self._singleton_cache.clear()
        self._scoped_cache.clear()

    def clear_scoped_cache(self) -> None:
        """Clear only the scoped instance cache.

        Useful when ending a scope (e.g., end of HTTP request).
        """
        self._scoped_cache.clear()

    def get_singleton_cache(self) -> Dict[Hashable, Any]:
        """Get reference to singleton cache for scope inheritance."""
        return self._singleton_cache
