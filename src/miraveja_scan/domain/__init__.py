"""
Domain layer - Core scanning and registration models.

This layer contains the fundamental rules and models for convention based
registration. It has no dependencies on other layers.
"""

from .enums import Lifetime, RegistrationStrategy, ScanState
from .exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DIException,
    UnresolvableError,
)
from .interfaces import IContainer, ILifetimeManager, IResolver
from .models import (
    Candidate,
    DecoratorDescriptor,
    Mapping,
    RegistrationSummary,
    ScanConfiguration,
)
from .type_names import full_type_name, type_name

# Rebuild Pydantic models to resolve forward references
Mapping.model_rebuild()
DecoratorDescriptor.model_rebuild()
ScanConfiguration.model_rebuild()

__all__ = [
    # Enums
    "Lifetime",
    "RegistrationStrategy",
    "ScanState",
    # Exceptions
    "DIException",
    "ConfigurationError",
    "CircularDependencyError",
    "UnresolvableError",
    # Interfaces
    "IContainer",
    "IResolver",
    "ILifetimeManager",
    # Models
    "Mapping",
    "Candidate",
    "DecoratorDescriptor",
    "RegistrationSummary",
    "ScanConfiguration",
    # Helpers
    "type_name",
    "full_type_name",
]
