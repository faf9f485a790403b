import importlib
import pkgutil
import sys
from types import ModuleType
from typing import Any, Callable, List, Optional, Union

from miraveja_scan.application.conventions import (
    Predicate,
    derives_from,
    has_attribute,
    in_namespace,
    name_contains,
)
from miraveja_scan.application.decoration import DecoratorPipelineBuilder
from miraveja_scan.application.orchestrator import ScanOrchestrator
from miraveja_scan.application.type_index import TypeIndex
from miraveja_scan.domain import (
    ConfigurationError,
    DecoratorDescriptor,
    IContainer,
    Lifetime,
    RegistrationStrategy,
    RegistrationSummary,
    ScanConfiguration,
)

ModuleLike = Union[ModuleType, str]


def load_module(module: ModuleLike) -> ModuleType:
    """Return ``module`` itself or import it by dotted name.

    Raises:
        ConfigurationError: If the module cannot be imported.
    """
    if isinstance(module, ModuleType):
        return module
    try:
        return importlib.import_module(module)
    except ImportError as e:
        raise ConfigurationError(f"Cannot import module '{module}': {e}") from e


class Scanner:
    """Fluent configuration surface of a convention based scan.

    Every method returns the scanner so calls can be chained. :meth:`execute`
    snapshots the configuration, runs it once and clears the decorator chain.

    Example:
        >>> container = DIContainer()
        >>> summary = RegistrationSummary()
        >>> (
        ...     Scanner(container)
        ...     .from_modules("app.services")
        ...     .add_classes_assignable_to(ITestService)
        ...     .with_name_convention("Service")
        ...     .exclude_namespace("app.services.legacy")
        ...     .pipeline(lambda p: p.use(ValidationDecorator).use(LoggingDecorator))
        ...     .with_summary(summary)
        ...     .as_singleton()
        ...     .execute()
        ... )
    """

    def __init__(self, container: IContainer, type_index: Optional[TypeIndex] = None) -> None:
        self._container = container
        self._type_index = type_index or TypeIndex()
        self._modules: List[ModuleType] = []
        self._capabilities: List[Any] = []
        self._include: List[Predicate] = []
        self._exclude: List[Predicate] = []
        self._decorators: List[DecoratorDescriptor] = []
        self._lifetime = Lifetime.SCOPED
        self._strategy = RegistrationStrategy.APPEND
        self._diagnostics: Optional[Callable[[str], None]] = None
        self._summary: Optional[RegistrationSummary] = None

    @property
    def summary(self) -> Optional[RegistrationSummary]:
        return self._summary

    def from_modules(self, *modules: ModuleLike) -> "Scanner":
        self._modules.extend(load_module(module) for module in modules)
        return self

    def from_module_of(self, cls: type) -> "Scanner":
        """Scan the module ``cls`` is defined in."""
        return self.from_modules(sys.modules[cls.__module__])

    def from_packages(self, *packages: ModuleLike) -> "Scanner":
        """Scan each package and every submodule below it, depth first in name order."""
        for package in packages:
            package = load_module(package)
            self._modules.append(package)
            for info in pkgutil.walk_packages(getattr(package, "__path__", []), prefix=f"{package.__name__}."):
                self._modules.append(load_module(info.name))
        return self

    def add_classes_assignable_to(self, *capabilities: Any) -> "Scanner":
        self._capabilities.extend(capabilities)
        return self

    def include(self, predicate: Predicate) -> "Scanner":
        self._include.append(predicate)
        return self

    def exclude(self, predicate: Predicate) -> "Scanner":
        self._exclude.append(predicate)
        return self

    def exclude_namespace(self, prefix: str) -> "Scanner":
        return self.exclude(in_namespace(prefix))

    def with_name_convention(self, *tokens: str) -> "Scanner":
        return self.include(name_contains(*tokens))

    def with_attribute(self, marker: Any) -> "Scanner":
        return self.include(has_attribute(marker))

    def with_base_class(self, base: type) -> "Scanner":
        return self.include(derives_from(base))

    def with_namespace(self, prefix: str) -> "Scanner":
        return self.include(in_namespace(prefix))

    def pipeline(self, configure: Callable[[DecoratorPipelineBuilder], Any]) -> "Scanner":
        """Append decorators declared through a :class:`DecoratorPipelineBuilder`."""
        builder = DecoratorPipelineBuilder()
        configure(builder)
        self._decorators.extend(builder.build())
        return self

    def with_diagnostics(self, log: Callable[[str], None]) -> "Scanner":
        self._diagnostics = log
        return self

    def with_strategy(self, strategy: RegistrationStrategy) -> "Scanner":
        self._strategy = strategy
        return self

    def with_summary(self, summary: Optional[RegistrationSummary] = None) -> "Scanner":
        """Report the run into ``summary``, or into a new one exposed by :attr:`summary`."""
        self._summary = summary if summary is not None else RegistrationSummary()
        return self

    def with_lifetime(self, lifetime: Lifetime) -> "Scanner":
        self._lifetime = lifetime
        return self

    def as_scoped(self) -> "Scanner":
        return self.with_lifetime(Lifetime.SCOPED)

    def as_singleton(self) -> "Scanner":
        return self.with_lifetime(Lifetime.SINGLETON)

    def as_transient(self) -> "Scanner":
        return self.with_lifetime(Lifetime.TRANSIENT)

    def build(self) -> ScanConfiguration:
        """Snapshot the current settings into an immutable configuration."""
        return ScanConfiguration(
            modules=tuple(self._modules),
            capabilities=tuple(self._capabilities),
            include_predicates=tuple(self._include),
            exclude_predicates=tuple(self._exclude),
            decorators=tuple(self._decorators),
            lifetime=self._lifetime,
            strategy=self._strategy,
            diagnostics=self._diagnostics,
            summary=self._summary,
        )

    def execute(self) -> Optional[RegistrationSummary]:
        """Run one scan with the current settings.

        The decorator chain is cleared afterwards, even when the run fails.
        """
        configuration = self.build()
        try:
            return ScanOrchestrator(self._container, self._type_index).execute(configuration)
        finally:
            self._decorators = []


def scan(container: IContainer, configure: Callable[[Scanner], Any]) -> IContainer:
    """Configure a :class:`Scanner` for ``container``, execute it and return the container.

    Example:
        >>> scan(container, lambda s: s.from_module_of(TestService).add_classes_assignable_to(ITestService))
    """
    scanner = Scanner(container)
    configure(scanner)
    scanner.execute()
    return container
