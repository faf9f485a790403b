import inspect
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple, TypeVar, get_args, get_origin

from miraveja_scan.application.circular_detector import CircularDependencyDetector
from miraveja_scan.application.lifetime_manager import LifetimeManager
from miraveja_scan.application.resolver import DependencyResolver
from miraveja_scan.application.type_index import generic_bases
from miraveja_scan.domain import (
    IContainer,
    IResolver,
    Lifetime,
    Mapping,
)

T = TypeVar("T")


def close_implementation(implementation: type, service_origin: type, type_args: Tuple[Any, ...]) -> Optional[Any]:
    """Close a generic implementation for a requested parameterisation of its service.

    The type variables the implementation passes to ``service_origin`` are bound to
    ``type_args`` and the implementation is parameterised with them, in the order
    of its own ``__parameters__``.

    Returns:
        The closed implementation (``GenericService[int]``), the implementation
        itself when it is not generic and already matches, or ``None`` when it
        cannot serve the requested arguments.

    Example:
        >>> close_implementation(GenericService, IGenericService, (int,))
        GenericService[int]
    """
    for base in generic_bases(implementation):
        if get_origin(base) is not service_origin:
            continue

        base_args = get_args(base)
        if len(base_args) != len(type_args):
            continue

        bindings: Dict[Any, Any] = {}
        for declared, requested in zip(base_args, type_args):
            if isinstance(declared, TypeVar):
                if bindings.setdefault(declared, requested) != requested:
                    break
            elif declared != requested:
                break
        else:
            parameters = getattr(implementation, "__parameters__", ())
            if not parameters:
                return implementation
            if any(parameter not in bindings for parameter in parameters):
                continue
            closed_args = tuple(bindings[parameter] for parameter in parameters)
            return implementation[closed_args]
    return None


class DIContainer(IContainer):
    """Dependency injection container holding an ordered list of mappings.

    Several mappings may coexist for one service type: :meth:`resolve` returns
    the most recently added one and :meth:`resolve_all` returns all of them.
    Unregistered concrete classes are auto-wired and open generic mappings are
    closed on demand.

    Attributes:
        _mappings: Mappings in registration order.
        _resolver: Component responsible for auto-wiring dependencies.
        _lifetime_manager: Component managing instance lifetimes.
        _circular_detector: Component detecting circular dependencies.
        _is_scope: Whether this container was created by :meth:`create_scope`.
    """

    def __init__(self, parent: Optional["DIContainer"] = None) -> None:
        """Initialize the container.

        Args:
            parent: Root container when creating a scope. The scope copies the
                parent's mappings and shares its singleton cache.
        """
        self._mappings: List[Mapping] = parent.get_all_mappings() if parent else []
        self._resolver: IResolver = DependencyResolver()
        self._lifetime_manager = LifetimeManager(
            parent._lifetime_manager.get_singleton_cache() if parent else None,
        )
        self._circular_detector = CircularDependencyDetector()
        self._is_scope = parent is not None

    def add(self, mapping: Mapping) -> None:
        """Append a mapping, keeping any existing mapping of the same service type."""
        self._mappings.append(mapping)

    def remove(self, mapping: Mapping) -> None:
        """Remove a mapping.

        Raises:
            ValueError: If the mapping is not registered in this container.
        """
        self._mappings.remove(mapping)

    def get_mappings(self, service_type: Any) -> List[Mapping]:
        return [mapping for mapping in self._mappings if mapping.service_type == service_type]

    def get_all_mappings(self) -> List[Mapping]:
        return list(self._mappings)

    def _register(
        self,
        dependencies: Dict[Any, Callable[[IContainer], Any]],
        lifetime: Lifetime,
    ) -> None:
        for dependency_type, builder in dependencies.items():
            self.add(Mapping(service_type=dependency_type, implementation_factory=builder, lifetime=lifetime))

    def register_singletons(self, dependencies: Dict[Any, Callable[[IContainer], Any]]) -> None:
        """Register multiple singleton dependencies at once.

        Args:
            dependencies: Dictionary mapping dependency types to builder functions.
                         Each builder receives the container and returns an instance.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     DatabaseConnection: lambda c: DatabaseConnection(c.resolve(DatabaseConfig)),
            ... })
        """
        self._register(dependencies, Lifetime.SINGLETON)

    def register_scoped(self, dependencies: Dict[Any, Callable[[IContainer], Any]]) -> None:
        """Register multiple scoped dependencies at once.

        Scoped dependencies are created once per container scope.
        """
        self._register(dependencies, Lifetime.SCOPED)

    def register_transients(self, dependencies: Dict[Any, Callable[[IContainer], Any]]) -> None:
        """Register multiple transient dependencies at once.

        Transient dependencies are created fresh on each resolution.

        Example:
            >>> container.register_transients({
            ...     RequestHandler: lambda c: RequestHandler(c.resolve(DatabaseConnection)),
            ... })
        """
        self._register(dependencies, Lifetime.TRANSIENT)

    def _activate(self, mapping: Mapping, implementation: Any = None, cache_key: Optional[Hashable] = None) -> Any:
        def build() -> Any:
            if mapping.implementation_factory is not None:
                return mapping.implementation_factory(self)
            if mapping.implementation_instance is not None:
                return mapping.implementation_instance
            return self.create_instance(implementation or mapping.implementation_type)

        return self._lifetime_manager.get_or_create(mapping, build, cache_key)

    def _open_generic_matches(self, dependency_type: Any) -> List[Tuple[Mapping, Any]]:
        origin = get_origin(dependency_type)
        if origin is None or not inspect.isclass(origin):
            return []

        type_args = get_args(dependency_type)
        matches = []
        for mapping in self.get_mappings(origin):
            if mapping.implementation_type is None:
                matches.append((mapping, None))
                continue
            implementation = close_implementation(mapping.implementation_type, origin, type_args)
            if implementation is not None:
                matches.append((mapping, implementation))
        return matches

    def resolve(self, dependency_type: type[T]) -> T:
        """Resolve and return an instance of the specified type.

        Resolution order: the last mapping registered for the exact type, then
        the last open generic mapping able to serve a closed alias, then
        auto-wiring of the type itself.

        Raises:
            UnresolvableError: If the dependency cannot be resolved.
            CircularDependencyError: If a circular dependency is detected.

        Example:
            >>> repository = container.resolve(IGenericService[int])
        """
        with self._circular_detector.resolving(dependency_type):
            mappings = self.get_mappings(dependency_type)
            if mappings:
                return self._activate(mappings[-1])

            open_matches = self._open_generic_matches(dependency_type)
            if open_matches:
                mapping, implementation = open_matches[-1]
                return self._activate(mapping, implementation, (mapping.key, dependency_type))

            return self._resolver.resolve_dependencies(dependency_type, self)

    def resolve_all(self, dependency_type: type[T]) -> List[T]:
        """Resolve one instance per mapping able to serve ``dependency_type``.

        Returns an empty list when nothing is registered; no auto-wiring happens.

        Example:
            >>> handlers = container.resolve_all(ITestService)
        """
        with self._circular_detector.resolving(dependency_type):
            instances = [self._activate(mapping) for mapping in self.get_mappings(dependency_type)]
            for mapping, implementation in self._open_generic_matches(dependency_type):
                instances.append(self._activate(mapping, implementation, (mapping.key, dependency_type)))
            return instances

    def create_instance(self, implementation_type: Any) -> Any:
        """Construct ``implementation_type`` through auto-wiring, ignoring its own mappings."""
        return self._resolver.resolve_dependencies(implementation_type, self)

    def create_scope(self) -> "DIContainer":
        """Create a child container for scoped lifetime.

        Scoped containers inherit parent mappings and singletons but maintain a
        separate instance cache for scoped dependencies.

        Example:
            >>> scoped = container.create_scope()
            >>> ctx1 = scoped.resolve(RequestContext)
            >>> ctx2 = scoped.resolve(RequestContext)
            >>> assert ctx1 is ctx2
        """
        return DIContainer(parent=self)

    def clear(self) -> None:
        """Clear all mappings and cached instances.

        A scope only drops its own scoped instances, leaving shared singletons intact.
        """
        self._mappings.clear()
        if self._is_scope:
            self._lifetime_manager.clear_scoped_cache()
        else:
            self._lifetime_manager.clear_cache()
        self._circular_detector.clear()
