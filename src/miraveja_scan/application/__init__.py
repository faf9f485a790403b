"""
Application layer - Use cases and orchestration.

This layer contains the scan pipeline and the container it registers into.
It depends only on the Domain layer.
"""

from .attributes import attribute, get_attributes
from .circular_detector import CircularDependencyDetector
from .container import DIContainer
from .conventions import ConventionFilter, derives_from, has_attribute, in_namespace, name_contains
from .decoration import DecoratorComposer, DecoratorPipelineBuilder
from .lifetime_manager import LifetimeManager
from .orchestrator import ScanOrchestrator, ScanRun
from .registration import RegistrationResolver
from .resolver import DependencyResolver
from .scanner import Scanner, scan
from .type_index import TypeIndex, matches

__all__ = [
    "DIContainer",
    "DependencyResolver",
    "LifetimeManager",
    "CircularDependencyDetector",
    "TypeIndex",
    "matches",
    "ConventionFilter",
    "name_contains",
    "has_attribute",
    "derives_from",
    "in_namespace",
    "attribute",
    "get_attributes",
    "RegistrationResolver",
    "DecoratorComposer",
    "DecoratorPipelineBuilder",
    "ScanOrchestrator",
    "ScanRun",
    "Scanner",
    "scan",
]
