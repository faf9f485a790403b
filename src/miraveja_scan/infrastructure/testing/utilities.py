from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar

from miraveja_scan.application import DIContainer
from miraveja_scan.domain import IContainer, Lifetime, Mapping

T = TypeVar("T")


class TestContainer(DIContainer):
    """DI container for testing with dependency override capabilities.

    Copies every mapping of a parent container (typically one filled by a scan)
    and lets tests replace the mappings of selected service types. An override
    replaces all mappings of its service type, including decorated ones.

    Attributes:
        _parent_container: The container mappings are copied from.
        _overrides: Mappings replaced by an override, per service type, restored by
            :meth:`reset_overrides`.

    Example:
        >>> scan(container, lambda s: s.from_modules("app.services").add_classes_assignable_to(IEmailService))
        >>>
        >>> def test_user_service():
        ...     test_container = TestContainer(container)
        ...     mock_email = MockEmailService()
        ...     test_container.mock_singleton(IEmailService, mock_email)
        ...     service = test_container.resolve(UserService)
        ...     assert service.email is mock_email
    """

    __test__ = False  # Tell pytest not to collect this class as a test

    def __init__(self, parent_container: Optional[IContainer] = None) -> None:
        """Initialize the test container.

        Args:
            parent_container: Optional container to copy mappings from.
                            If None, creates an empty container.
        """
        super().__init__()
        self._parent_container = parent_container
        self._overrides: Dict[Any, List[Mapping]] = {}

        if parent_container:
            self._mappings = parent_container.get_all_mappings()

    def _replace(self, mapping: Mapping) -> None:
        existing = self.get_mappings(mapping.service_type)
        self._overrides.setdefault(mapping.service_type, existing)
        for replaced in existing:
            self.remove(replaced)
        self._lifetime_manager.clear_cache()
        self.add(mapping)

    def mock_singleton(self, dependency_type: Type[T], mock_instance: T) -> None:
        """Replace every mapping of ``dependency_type`` with a mock instance.

        Example:
            >>> test_container.mock_singleton(ITestService, FakeTestService())
        """
        self._replace(
            Mapping(service_type=dependency_type, implementation_instance=mock_instance, lifetime=Lifetime.SINGLETON),
        )

    def mock_transient(self, dependency_type: Type[T], factory: Callable[[], T]) -> None:
        """Replace every mapping of ``dependency_type`` with a mock factory called per resolution."""
        self._replace(
            Mapping(
                service_type=dependency_type,
                implementation_factory=lambda c: factory(),
                lifetime=Lifetime.TRANSIENT,
            ),
        )

    def override_registration(
        self, dependency_type: Type[T], builder: Callable[[IContainer], T], lifetime: Lifetime
    ) -> None:
        """Replace every mapping of ``dependency_type`` with a builder and lifetime.

        Example:
            >>> test_container.override_registration(
            ...     ICacheService,
            ...     lambda c: InMemoryCacheService(),
            ...     Lifetime.SCOPED,
            ... )
        """
        self._replace(Mapping(service_type=dependency_type, implementation_factory=builder, lifetime=lifetime))

    def reset_overrides(self) -> None:
        """Remove all overrides and restore the mappings they replaced.

        Mappings added without an override are kept.
        """
        for service_type, originals in self._overrides.items():
            for mapping in self.get_mappings(service_type):
                self.remove(mapping)
            self._mappings.extend(originals)
        self._overrides.clear()
        self._lifetime_manager.clear_cache()

    def __enter__(self) -> "TestContainer":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.reset_overrides()
        self.clear()
        return False


def create_mock_container(*singletons: Tuple[Type, Any]) -> TestContainer:
    """Create a test container with pre-configured mock singletons.

    Args:
        *singletons: Tuples of (dependency_type, mock_instance).

    Returns:
        TestContainer with mocked dependencies.
    """
    container = TestContainer()

    for dependency_type, mock_instance in singletons:
        container.mock_singleton(dependency_type, mock_instance)

    return container


class MockScope:
    """Context manager for scoped testing with automatic cleanup.

    Example:
        >>> with MockScope(container) as scoped:
        ...     assert scoped.resolve(ITestService) is scoped.resolve(ITestService)
    """

    def __init__(self, parent_container: IContainer) -> None:
        self._parent_container = parent_container
        self._scoped_container: Optional[IContainer] = None

    def __enter__(self) -> IContainer:
        self._scoped_container = self._parent_container.create_scope()
        return self._scoped_container

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if self._scoped_container:
            self._scoped_container.clear()
            self._scoped_container = None
        return False
