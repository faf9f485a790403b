from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Hashable, List, Optional, Type, TypeVar

from miraveja_scan.domain.models import Mapping

T = TypeVar("T")


class IContainer(ABC):
    """Abstract interface for the dependency injection container the scanner writes into."""

    @abstractmethod
    def add(self, mapping: Mapping) -> None:
        """Append a mapping to the container."""

    @abstractmethod
    def remove(self, mapping: Mapping) -> None:
        """Remove a mapping from the container."""

    @abstractmethod
    def get_mappings(self, service_type: Any) -> List[Mapping]:
        """List current mappings registered for ``service_type``, in registration order."""

    @abstractmethod
    def get_all_mappings(self) -> List[Mapping]:
        """Get a copy of every mapping, in registration order."""

    @abstractmethod
    def register_singletons(self, dependencies: Dict[Any, Callable[["IContainer"], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: A dictionary mapping types to their builder functions.
        """

    @abstractmethod
    def register_transients(self, dependencies: Dict[Any, Callable[["IContainer"], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Args:
            dependencies: A dictionary mapping types to their builder functions.
        """

    @abstractmethod
    def resolve(self, dependency_type: Type[T]) -> T:
        """Resolve and return an instance of the requested type.

        Args:
            dependency_type: The type to resolve.
        """

    @abstractmethod
    def resolve_all(self, dependency_type: Type[T]) -> List[T]:
        """Resolve one instance per mapping registered for the requested type.

        Args:
            dependency_type: The type to resolve.
        """

    @abstractmethod
    def create_instance(self, implementation_type: Any) -> Any:
        """Construct ``implementation_type`` with its constructor dependencies resolved."""

    @abstractmethod
    def create_scope(self) -> "IContainer":
        """Create and return a new scoped container instance."""

    @abstractmethod
    def clear(self) -> None:
        """Clear all mappings and instances from the container."""


class IResolver(ABC):
    """Abstract interface for dependency resolution operations."""

    @abstractmethod
    def resolve_dependencies(
        self,
        dependency_type: Any,
        container: IContainer,
    ) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            dependency_type: The type to resolve.
            container: The DI container to use for resolving dependencies.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvableError: If a dependency cannot be resolved.
        """


class ILifetimeManager(ABC):
    """Abstract interface for managing dependency lifetimes."""

    @abstractmethod
    def get_or_create(
        self,
        mapping: Mapping,
        factory: Callable[[], Any],
        cache_key: Optional[Hashable] = None,
    ) -> Any:
        """Get existing instance or create a new one based on lifetime.

        Args:
            mapping: The mapping being resolved.
            factory: A callable to create a new instance if needed.
            cache_key: Optional key overriding the mapping's own cache key.
        """

    @abstractmethod
    def clear_cache(self) -> None:
        """Clear any cached instances managed by this lifetime manager."""

    @abstractmethod
    def clear_scoped_cache(self) -> None:
        """Clear only the scoped instances cache."""
