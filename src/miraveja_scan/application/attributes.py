"""Sidecar registry of class attributes used by attribute conventions."""

import inspect
from typing import Any, Callable, List, Tuple, TypeVar
from weakref import WeakKeyDictionary

C = TypeVar("C", bound=type)

_REGISTRY: "WeakKeyDictionary[type, Tuple[Any, ...]]" = WeakKeyDictionary()


def attribute(*markers: Any) -> Callable[[C], C]:
    """Class decorator attaching attribute markers to a class.

    Markers may be marker classes or instances of them. They are inherited by
    subclasses.

    Example:
        >>> class AutoRegister:
        ...     pass
        >>>
        >>> @attribute(AutoRegister)
        ... class AttributeBasedService(ITestService):
        ...     pass
    """

    def decorator(cls: C) -> C:
        _REGISTRY[cls] = _REGISTRY.get(cls, ()) + markers
        return cls

    return decorator


def get_attributes(cls: type) -> Tuple[Any, ...]:
    """All markers attached to ``cls`` or any of its base classes."""
    collected: List[Any] = []
    for klass in cls.__mro__:
        for marker in _REGISTRY.get(klass, ()):
            if marker not in collected:
                collected.append(marker)
    return tuple(collected)


def has_marker(attributes: Tuple[Any, ...], marker: Any) -> bool:
    """Whether ``marker`` is among ``attributes`` directly or as the class of one of them."""
    for value in attributes:
        if value is marker:
            return True
        if inspect.isclass(marker) and isinstance(value, marker):
            return True
        if inspect.isclass(marker) and inspect.isclass(value) and issubclass(value, marker):
            return True
    return False


def clear_attributes(cls: type) -> None:
    _REGISTRY.pop(cls, None)


