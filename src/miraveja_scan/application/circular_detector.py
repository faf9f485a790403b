"""Application layer - Circular dependency detection."""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List

from miraveja_scan.domain import CircularDependencyError


class CircularDependencyDetector:
    """Tracks the service types being resolved on the current thread.

    Closed generic aliases are distinct entries: resolving ``IGenericService[int]``
    while ``IGenericService[str]`` is on the stack is not a cycle.

    Attributes:
        _local: Thread-local storage holding the resolution stack.

    Example:
        >>> detector = CircularDependencyDetector()
        >>> with detector.resolving(ITestService):
        ...     detector.push(ITestService)
        Traceback (most recent call last):
        CircularDependencyError: Circular dependency detected: ITestService -> ITestService
    """

    def __init__(self) -> None:
        self._local = threading.local()

    def _stack(self) -> List[Any]:
        if not hasattr(self._local, "stack"):
            self._local.stack = []
        return self._local.stack

    def push(self, dependency_type: Any) -> None:
        """Enter the resolution of ``dependency_type``.

        Raises:
            CircularDependencyError: If the type is already being resolved, with
                the chain from its first occurrence back to itself.
        """
        stack = self._stack()
        if dependency_type in stack:
            raise CircularDependencyError(stack[stack.index(dependency_type) :] + [dependency_type])
        stack.append(dependency_type)

    def pop(self) -> None:
        stack = self._stack()
        if stack:
            stack.pop()

    @contextmanager
    def resolving(self, dependency_type: Any) -> Iterator[None]:
        """Keep ``dependency_type`` on the stack for the duration of the block."""
        self.push(dependency_type)
        try:
            yield
        finally:
            self.pop()

    def clear(self) -> None:
        if hasattr(self._local, "stack"):
            self._local.stack.clear()
