"""
miraveja-scan: Convention based type discovery and decorator composition for dependency injection.

Public API exports for the miraveja-scan package.
"""

# Application exports
from miraveja_scan.application.attributes import attribute
from miraveja_scan.application.container import DIContainer
from miraveja_scan.application.decoration import DecoratorPipelineBuilder
from miraveja_scan.application.orchestrator import ScanOrchestrator
from miraveja_scan.application.scanner import Scanner, scan

# Domain exports
from miraveja_scan.domain.enums import Lifetime, RegistrationStrategy
from miraveja_scan.domain.exceptions import (
    CircularDependencyError,
    ConfigurationError,
    DIException,
    UnresolvableError,
)
from miraveja_scan.domain.models import Mapping, RegistrationSummary, ScanConfiguration

__version__ = "0.1.0"

__all__ = [
    # Container
    "DIContainer",
    # Scanning
    "Scanner",
    "scan",
    "ScanOrchestrator",
    "DecoratorPipelineBuilder",
    "attribute",
    # Enums
    "Lifetime",
    "RegistrationStrategy",
    # Models
    "Mapping",
    "RegistrationSummary",
    "ScanConfiguration",
    # Exceptions
    "DIException",
    "ConfigurationError",
    "CircularDependencyError",
    "UnresolvableError",
]
