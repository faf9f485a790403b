from typing import Any, List, Optional

from miraveja_scan.domain.type_names import type_name


class DIException(Exception):
    """Base exception for scan and DI related errors."""


class ConfigurationError(DIException):
    """Raised when a scan is configured in a way that cannot be executed.

    This occurs when:
    - A decorator pipeline targets a capability with more than one implementation.
    - A decorator pipeline targets an open generic service or uses an open generic decorator.
    - A decorator type cannot be instantiated.
    - A scan run is executed a second time.

    Attributes:
        service_type: The service type the error refers to, if any.
    """

    def __init__(self, message: str, service_type: Optional[Any] = None) -> None:
        self.service_type = service_type
        super().__init__(message)


class CircularDependencyError(DIException):
    """Raised when a circular dependency is detected.

    Attributes:
        dependency_chain: List of types involved in the circular dependency.
    """

    def __init__(self, dependency_chain: List[Any]) -> None:
        self.dependency_chain = dependency_chain
        message = f"Circular dependency detected: {' -> '.join([type_name(cls) for cls in dependency_chain])}"
        super().__init__(message)


class UnresolvableError(DIException):
    """Raised when a dependency cannot be resolved.

    This occurs when:
    - No registration exists for the requested type and it cannot be auto-wired.
    - Constructor parameters lack type hints.
    - A decorator constructor parameter cannot be satisfied by the container.

    Attributes:
        cls: The type that could not be resolved.
        reason: Optional reason for the failure.
    """

    def __init__(self, cls: Any, reason: Optional[str] = None) -> None:
        self.cls = cls
        self.reason = reason
        message = f"Cannot resolve dependency for type: {type_name(cls)}"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message)
