import inspect
from types import UnionType
from typing import Any, Callable, List, Optional, Sequence, Tuple, Union, get_args, get_origin

from miraveja_scan.application.diagnostics import Diagnostics
from miraveja_scan.application.resolver import constructor_parameters
from miraveja_scan.application.type_index import is_open_generic
from miraveja_scan.domain import (
    ConfigurationError,
    DecoratorDescriptor,
    IContainer,
    Mapping,
    RegistrationSummary,
    UnresolvableError,
    type_name,
)

InnerFactory = Callable[[IContainer], Any]


class DecoratorPipelineBuilder:
    """Collects the decorators of a pipeline in declaration order.

    The first declared decorator ends up outermost once composed.

    Example:
        >>> builder = DecoratorPipelineBuilder()
        >>> builder.use(ValidationDecorator).use(LoggingDecorator)
        >>> # resolves as ValidationDecorator(LoggingDecorator(TestService()))
    """

    def __init__(self) -> None:
        self._decorators: List[DecoratorDescriptor] = []

    def use(self, decorator_type: Any) -> "DecoratorPipelineBuilder":
        """Add a decorator class or closed generic alias, bound to the wrapped instance by type hint."""
        self._decorators.append(
            DecoratorDescriptor(decorator_type=decorator_type, name=type_name(decorator_type)),
        )
        return self

    def use_factory(
        self,
        factory: Callable[[Any, IContainer], Any],
        name: Optional[str] = None,
    ) -> "DecoratorPipelineBuilder":
        """Add a decorator built by ``factory(inner, container)``."""
        self._decorators.append(
            DecoratorDescriptor(factory=factory, name=name or getattr(factory, "__name__", "factory")),
        )
        return self

    def build(self) -> Tuple[DecoratorDescriptor, ...]:
        return tuple(self._decorators)


def accepts(hint: Any, value: Any) -> bool:
    """Whether a parameter annotated with ``hint`` can receive ``value``."""
    origin = get_origin(hint)
    if origin in (Union, UnionType):
        return any(accepts(arg, value) for arg in get_args(hint) if arg is not type(None))

    target = origin or hint
    if not inspect.isclass(target):
        return False
    try:
        return isinstance(value, target)
    except TypeError:
        # Protocols that are not runtime checkable
        return target in type(value).__mro__


class DecoratorComposer:
    """Rewrites the mappings of a service so they resolve through a decorator chain.

    Each existing mapping is replaced by a factory mapping with the same
    lifetime. The factory reproduces the original resolution and wraps the
    result, last declared decorator first, so the first declared decorator is
    outermost.

    Attributes:
        _container: Container whose mappings are rewritten.
        _diagnostics: Destination of decision lines.
        _summary: Optional audit report.
    """

    def __init__(
        self,
        container: IContainer,
        diagnostics: Optional[Diagnostics] = None,
        summary: Optional[RegistrationSummary] = None,
    ) -> None:
        self._container = container
        self._diagnostics = diagnostics or Diagnostics()
        self._summary = summary

    def validate(self, service_type: Any, decorators: Sequence[DecoratorDescriptor]) -> None:
        """Check that ``decorators`` can be applied to ``service_type``.

        Raises:
            ConfigurationError: For open generic services or decorators, and for
                decorator types that cannot be instantiated.
        """
        if is_open_generic(service_type):
            raise ConfigurationError(
                "Decorator pipelines are supported only for non-generic services, "
                f"got open generic {type_name(service_type)}.",
                service_type,
            )

        for descriptor in decorators:
            decorator_type = descriptor.decorator_type
            if decorator_type is None:
                continue
            if getattr(decorator_type, "__parameters__", ()):
                raise ConfigurationError(
                    "Decorator pipelines are supported only for non-generic decorators, "
                    f"got open generic {descriptor.name}.",
                    service_type,
                )
            target = get_origin(decorator_type) or decorator_type
            if not inspect.isclass(target) or inspect.isabstract(target):
                raise ConfigurationError(
                    f"No usable constructor found for decorator type {descriptor.name}.",
                    service_type,
                )

    def decorate(self, service_type: Any, decorators: Sequence[DecoratorDescriptor]) -> List[Mapping]:
        """Wrap every mapping of ``service_type`` in the decorator chain.

        Args:
            service_type: Closed or non-generic service type to decorate.
            decorators: Decorator chain in declaration order.

        Returns:
            The replacement mappings, in the order of the originals.

        Raises:
            ConfigurationError: If the chain cannot be applied to the service.
        """
        self.validate(service_type, decorators)

        replacements = []
        for mapping in self._container.get_mappings(service_type):
            inner_factory = self._inner_factory(mapping)
            self._container.remove(mapping)
            replacement = Mapping(
                service_type=mapping.service_type,
                implementation_factory=self.compose(decorators, inner_factory),
                lifetime=mapping.lifetime,
            )
            self._container.add(replacement)
            replacements.append(replacement)

        for descriptor in reversed(decorators):
            record = f"{descriptor.name} → {type_name(service_type)}"
            if self._summary is not None:
                self._summary.decorators_applied.append(record)
            self._diagnostics.log(f"Applied decorator {descriptor.name} to {type_name(service_type)}")

        return replacements

    @staticmethod
    def _inner_factory(mapping: Mapping) -> InnerFactory:
        if mapping.implementation_factory is not None:
            return mapping.implementation_factory
        if mapping.implementation_instance is not None:
            instance = mapping.implementation_instance
            return lambda container: instance
        implementation_type = mapping.implementation_type
        return lambda container: container.create_instance(implementation_type)

    def compose(self, decorators: Sequence[DecoratorDescriptor], inner_factory: InnerFactory) -> InnerFactory:
        """Build a factory resolving ``decorators`` around ``inner_factory``'s result."""
        chain = tuple(decorators)

        def factory(container: IContainer) -> Any:
            instance = inner_factory(container)
            for descriptor in reversed(chain):
                instance = self.create_decorator_instance(container, descriptor, instance)
            return instance

        factory.__name__ = " → ".join(descriptor.name for descriptor in chain)
        return factory

    @staticmethod
    def create_decorator_instance(container: IContainer, descriptor: DecoratorDescriptor, inner: Any) -> Any:
        """Instantiate one decorator around ``inner``.

        Every constructor parameter whose type hint accepts ``inner`` receives it;
        the remaining parameters are resolved from ``container`` unless they have
        a default value.

        Raises:
            UnresolvableError: If a parameter has no type hint and no default, or
                the container cannot resolve it.
        """
        if descriptor.factory is not None:
            return descriptor.factory(inner, container)

        decorator_type = descriptor.decorator_type
        kwargs = {}
        for param_name, param, param_type in constructor_parameters(decorator_type):
            if param_type is not inspect.Parameter.empty and accepts(param_type, inner):
                kwargs[param_name] = inner
                continue
            if param.default is not inspect.Parameter.empty:
                continue
            if param_type is inspect.Parameter.empty:
                raise UnresolvableError(
                    decorator_type,
                    f"Parameter '{param_name}' lacks type hint and has no default value.",
                )
            kwargs[param_name] = container.resolve(param_type)

        return decorator_type(**kwargs)
