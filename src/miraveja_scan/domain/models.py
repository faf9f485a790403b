import inspect
from types import ModuleType
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Type, get_origin
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from miraveja_scan.domain.enums import Lifetime, RegistrationStrategy
from miraveja_scan.domain.type_names import type_name

if TYPE_CHECKING:
    from miraveja_scan.domain.interfaces import IContainer


class Mapping(BaseModel):
    """Value object binding a service type to one implementation source.

    Exactly one of ``implementation_type``, ``implementation_factory`` or
    ``implementation_instance`` must be provided.

    Attributes:
        service_type: The type consumers ask for (class, open definition or closed alias).
        implementation_type: Concrete class auto-wired by the container.
        implementation_factory: Builder that receives the resolving container.
        implementation_instance: Pre-built instance returned as is.
        lifetime: How long resolved instances live.
        key: Unique identity of this mapping, used for instance caching.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    service_type: Any = Field(..., description="The service type being registered.")
    implementation_type: Optional[Type] = Field(default=None, description="Concrete implementation class.")
    implementation_factory: Optional[Callable[["IContainer"], Any]] = Field(
        default=None, description="Factory receiving the container and returning an instance."
    )
    implementation_instance: Optional[Any] = Field(default=None, description="Pre-built instance.")
    lifetime: Lifetime = Field(..., description="The lifetime of the registered dependency.")
    key: str = Field(default_factory=lambda: uuid4().hex, description="Unique mapping identity.")

    @model_validator(mode="after")
    def _check_single_source(self) -> "Mapping":
        sources = [
            self.implementation_type is not None,
            self.implementation_factory is not None,
            self.implementation_instance is not None,
        ]
        if sum(sources) != 1:
            raise ValueError(
                "Exactly one of implementation_type, implementation_factory or "
                "implementation_instance must be provided."
            )
        return self

    @property
    def implementation_name(self) -> str:
        """Readable name of the implementation source."""
        if self.implementation_type is not None:
            return type_name(self.implementation_type)
        if self.implementation_instance is not None:
            return type_name(type(self.implementation_instance))
        return getattr(self.implementation_factory, "__name__", "factory")

    def __str__(self) -> str:
        return f"{type_name(self.service_type)} → {self.implementation_name} ({self.lifetime.value})"


class Candidate(BaseModel):
    """Read-only metadata of a class discovered in a module.

    Attributes:
        cls: The class itself.
        name: Class name.
        namespace: Dotted module path the class is defined in.
        attributes: Tags attached through the attribute registry.
        base_types: Method resolution order without the class itself.
        interfaces: Implemented interfaces, including parameterised generic bases.
        is_abstract: Whether the class still has abstract methods.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    cls: Type = Field(..., description="The discovered class.")
    name: str = Field(..., description="Class name.")
    namespace: str = Field(..., description="Module the class is defined in.")
    attributes: Tuple[Any, ...] = Field(default=(), description="Attribute tags of the class.")
    base_types: Tuple[Type, ...] = Field(default=(), description="Base class chain.")
    interfaces: Tuple[Any, ...] = Field(default=(), description="Implemented interfaces.")
    is_abstract: bool = Field(default=False, description="Whether the class is abstract.")


class DecoratorDescriptor(BaseModel):
    """One entry of a decorator pipeline.

    Either ``decorator_type`` (constructor binding by type hints) or ``factory``
    (explicit ``(inner, container) -> instance`` contract) is set.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    decorator_type: Optional[Any] = Field(default=None, description="Decorator class or closed generic alias.")
    factory: Optional[Callable[[Any, "IContainer"], Any]] = Field(
        default=None, description="Factory receiving the inner instance and the container."
    )
    name: str = Field(..., description="Name used in diagnostics and summaries.")

    @field_validator("decorator_type")
    @classmethod
    def _check_decorator_type(cls, value: Any) -> Any:
        if value is not None and not inspect.isclass(get_origin(value) or value):
            raise ValueError("decorator_type must be a class or a parameterised generic class.")
        return value

    @model_validator(mode="after")
    def _check_single_source(self) -> "DecoratorDescriptor":
        if (self.decorator_type is None) == (self.factory is None):
            raise ValueError("Exactly one of decorator_type or factory must be provided.")
        return self


class RegistrationSummary(BaseModel):
    """Append-only audit report of one scan run.

    Attributes:
        modules: Names of the scanned modules.
        capabilities: Names of the scanned capabilities.
        registered: Attempted registrations as ``service → implementation``.
        excluded: Names of candidates dropped by exclude predicates.
        decorators_applied: Applied decorators as ``decorator → service``.
    """

    modules: List[str] = Field(default_factory=list)
    capabilities: List[str] = Field(default_factory=list)
    registered: List[str] = Field(default_factory=list)
    excluded: List[str] = Field(default_factory=list)
    decorators_applied: List[str] = Field(default_factory=list)


class ScanConfiguration(BaseModel):
    """Immutable configuration of a single scan run.

    Built fresh by the :class:`~miraveja_scan.application.scanner.Scanner` for
    every execution and never reused across runs.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    modules: Tuple[ModuleType, ...] = Field(default=(), description="Modules to scan, in order.")
    capabilities: Tuple[Any, ...] = Field(default=(), description="Capabilities to scan for, in order.")
    include_predicates: Tuple[Callable[[Candidate], bool], ...] = Field(default=())
    exclude_predicates: Tuple[Callable[[Candidate], bool], ...] = Field(default=())
    decorators: Tuple[DecoratorDescriptor, ...] = Field(default=(), description="Decorator chain, outermost first.")
    lifetime: Lifetime = Field(default=Lifetime.SCOPED)
    strategy: RegistrationStrategy = Field(default=RegistrationStrategy.APPEND)
    diagnostics: Optional[Callable[[str], None]] = Field(default=None, description="Diagnostics sink.")
    summary: Optional[RegistrationSummary] = Field(default=None, description="Summary sink.")
