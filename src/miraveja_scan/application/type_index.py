"""Application layer - Type matching and discovery over a per-module type index."""

import inspect
import logging
from types import ModuleType
from typing import Any, Dict, Generic, List, Protocol, Tuple, get_args, get_origin

from miraveja_scan.application.attributes import get_attributes
from miraveja_scan.domain import Candidate

logger = logging.getLogger(__name__)

DECORATOR_SUFFIX = "Decorator"

_IGNORED_BASES = (object, Generic, Protocol)


def is_open_generic(tp: Any) -> bool:
    """Return whether ``tp`` is an unbound generic definition such as ``IRepository``."""
    return inspect.isclass(tp) and bool(getattr(tp, "__parameters__", ()))


def is_protocol_class(tp: Any) -> bool:
    return inspect.isclass(tp) and bool(getattr(tp, "_is_protocol", False))


def generic_bases(cls: type) -> List[Any]:
    """Collect the parameterised generic bases of ``cls`` and of all its ancestors.

    Type arguments a subclass passes to a generic parent are substituted into
    the parent's own bases, so ``IntSub(GenericService[int])`` implements
    ``IGenericService[int]`` rather than ``IGenericService[T]``.

    Example:
        >>> generic_bases(IntSub)
        [GenericService[int], IGenericService[int]]
    """
    bases: List[Any] = []
    _collect_generic_bases(cls, {}, bases)
    return bases


def _collect_generic_bases(klass: type, bindings: Dict[Any, Any], bases: List[Any]) -> None:
    for base in klass.__dict__.get("__orig_bases__", klass.__bases__):
        origin = get_origin(base)
        if origin is None:
            if inspect.isclass(base) and base not in _IGNORED_BASES:
                _collect_generic_bases(base, {}, bases)
            continue
        if origin in (Generic, Protocol):
            continue

        parameters = getattr(base, "__parameters__", ())
        if any(parameter in bindings for parameter in parameters):
            base = base[tuple(bindings.get(parameter, parameter) for parameter in parameters)]
        if base not in bases:
            bases.append(base)

        if inspect.isclass(origin):
            own_parameters = getattr(origin, "__parameters__", ())
            _collect_generic_bases(origin, dict(zip(own_parameters, get_args(base))), bases)


def implemented_interfaces(cls: type) -> Tuple[Any, ...]:
    """Interfaces implemented by ``cls``.

    Every class of the MRO except ``cls`` itself, ``object``, ``Generic``,
    ``Protocol`` and open generic definitions, followed by every parameterised
    generic base (``IGenericService[T]``, ``IRepository[int]``).
    """
    interfaces: List[Any] = [
        klass for klass in cls.__mro__[1:] if klass not in _IGNORED_BASES and not is_open_generic(klass)
    ]
    interfaces.extend(generic_bases(cls))
    return tuple(interfaces)


def matches(candidate_interface: Any, capability: Any) -> bool:
    """Decide whether an implemented interface satisfies a requested capability.

    Open generic capabilities match any parameterisation of themselves; closed
    capabilities only match themselves.
    """
    if is_open_generic(capability):
        return get_origin(candidate_interface) is capability
    return candidate_interface == capability


def service_type_for(interface: Any) -> Any:
    """Derive the service type to register for a matched interface.

    An alias still carrying type variables registers under its generic
    definition; closed aliases and plain classes register as themselves.
    """
    origin = get_origin(interface)
    if origin is not None and getattr(interface, "__parameters__", ()):
        return origin
    return interface


def describe(cls: type) -> Candidate:
    """Build the read-only :class:`Candidate` view of a class."""
    return Candidate(
        cls=cls,
        name=cls.__name__,
        namespace=cls.__module__,
        attributes=get_attributes(cls),
        base_types=cls.__mro__[1:],
        interfaces=implemented_interfaces(cls),
        is_abstract=inspect.isabstract(cls),
    )


def is_registrable(candidate: Candidate) -> bool:
    """Concrete, non protocol classes whose name does not flag them as decorators."""
    return (
        not candidate.is_abstract
        and not is_protocol_class(candidate.cls)
        and not candidate.name.endswith(DECORATOR_SUFFIX)
    )


class TypeIndex:
    """Caches the candidates defined directly in each module.

    The index for a module is built the first time it is requested and reused
    by every later discovery against the same module.

    Attributes:
        _modules: Candidates per module name, in definition order.
    """

    def __init__(self) -> None:
        self._modules: Dict[str, Tuple[Candidate, ...]] = {}

    def index(self, module: ModuleType) -> Tuple[Candidate, ...]:
        """Return the candidates of ``module``, building the index on first use."""
        if module.__name__ not in self._modules:
            self._modules[module.__name__] = self._build(module)
        return self._modules[module.__name__]

    @staticmethod
    def _build(module: ModuleType) -> Tuple[Candidate, ...]:
        seen = set()
        candidates = []
        for value in vars(module).values():
            if not inspect.isclass(value) or value.__module__ != module.__name__ or value in seen:
                continue
            seen.add(value)
            candidates.append(describe(value))
        logger.debug("Indexed %d classes in module %s", len(candidates), module.__name__)
        return tuple(candidates)

    def discover(self, module: ModuleType, capability: Any) -> List[Candidate]:
        """Find the registrable classes of ``module`` implementing ``capability``.

        Example:
            >>> index = TypeIndex()
            >>> [c.name for c in index.discover(services, ITestService)]
            ['TestService', 'AnotherTestService']
        """
        return [
            candidate
            for candidate in self.index(module)
            if is_registrable(candidate)
            and any(matches(interface, capability) for interface in candidate.interfaces)
        ]

    def clear(self) -> None:
        self._modules.clear()
