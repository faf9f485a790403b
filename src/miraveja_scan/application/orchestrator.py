from types import ModuleType
from typing import Any, List, Optional

from miraveja_scan.application.conventions import ConventionFilter
from miraveja_scan.application.decoration import DecoratorComposer
from miraveja_scan.application.diagnostics import Diagnostics
from miraveja_scan.application.registration import RegistrationResolver
from miraveja_scan.application.type_index import TypeIndex, is_open_generic, matches, service_type_for
from miraveja_scan.domain import (
    Candidate,
    ConfigurationError,
    IContainer,
    RegistrationSummary,
    ScanConfiguration,
    ScanState,
    full_type_name,
    type_name,
)


class ScanRun:
    """One execution of a scan configuration against a container.

    Walks every ``(module, capability)`` pair in declared order: discovery,
    convention filtering, registration of each matching interface and finally
    the decorator pipeline. A run goes ``IDLE`` → ``SCANNING_MODULE`` →
    ``SCANNING_CAPABILITY`` → ``DONE`` and cannot be executed twice.

    Failures propagate immediately and leave the container as it was at the
    failure point.

    Attributes:
        _container: Container receiving the mappings.
        _configuration: The immutable configuration of this run.
        _type_index: Index used for discovery.
        _state: Current state of the run.
    """

    def __init__(
        self,
        container: IContainer,
        configuration: ScanConfiguration,
        type_index: Optional[TypeIndex] = None,
    ) -> None:
        self._container = container
        self._configuration = configuration
        self._type_index = type_index or TypeIndex()
        self._state = ScanState.IDLE

        self._summary = configuration.summary
        self._diagnostics = Diagnostics(configuration.diagnostics)
        self._filter = ConventionFilter(configuration.include_predicates, configuration.exclude_predicates)
        self._registration = RegistrationResolver(container, self._diagnostics, self._summary)
        self._composer = DecoratorComposer(container, self._diagnostics, self._summary)

    @property
    def state(self) -> ScanState:
        return self._state

    def execute(self) -> Optional[RegistrationSummary]:
        """Run the pipeline over every configured module and capability.

        Returns:
            The configured summary, filled in, or ``None`` when none was requested.

        Raises:
            ConfigurationError: If the run was already executed, or a decorator
                pipeline cannot be applied.
            UnresolvableError: Surfaced from the container, never caught here.
        """
        if self._state != ScanState.IDLE:
            raise ConfigurationError(f"Scan run is in state '{self._state.value}'; create a new run to scan again.")

        for module in self._configuration.modules:
            self._state = ScanState.SCANNING_MODULE
            self._scan_module(module)

        self._state = ScanState.DONE
        return self._summary

    def _scan_module(self, module: ModuleType) -> None:
        if self._summary is not None:
            self._summary.modules.append(module.__name__)
        self._diagnostics.log(f"Scanning module: {module.__name__}")

        for capability in self._configuration.capabilities:
            self._state = ScanState.SCANNING_CAPABILITY
            self._scan_capability(module, capability)

    def _scan_capability(self, module: ModuleType, capability: Any) -> None:
        if self._summary is not None:
            self._summary.capabilities.append(full_type_name(capability))
        self._diagnostics.log(f"Scanning for interface: {full_type_name(capability)}")

        discovered = self._type_index.discover(module, capability)
        for candidate in discovered:
            self._diagnostics.log(f"Discovered {candidate.name} in {candidate.namespace}")

        survivors, excluded = self._filter.apply(discovered)
        for candidate in excluded:
            if self._summary is not None:
                self._summary.excluded.append(candidate.name)
            self._diagnostics.log(f"Excluded {candidate.name} by exclude predicate")

        for candidate in survivors:
            for interface in candidate.interfaces:
                if not matches(interface, capability):
                    continue
                self._registration.register(
                    service_type_for(interface),
                    candidate.cls,
                    self._configuration.lifetime,
                    self._configuration.strategy,
                )

        self._apply_pipeline(capability, survivors)

    def _apply_pipeline(self, capability: Any, survivors: List[Candidate]) -> None:
        decorators = self._configuration.decorators
        if not decorators:
            return

        if is_open_generic(capability):
            self._diagnostics.log(f"Skipping decorator pipeline for open generic {type_name(capability)}")
            return

        if len(survivors) > 1:
            message = f"Cannot apply pipeline to {type_name(capability)} with multiple implementations."
            self._diagnostics.error(message)
            raise ConfigurationError(message, capability)

        if survivors:
            self._composer.decorate(capability, decorators)


class ScanOrchestrator:
    """Executes scan configurations against one container.

    Every call to :meth:`execute` starts a fresh :class:`ScanRun`, so nothing
    configured for one run leaks into the next.

    Example:
        >>> orchestrator = ScanOrchestrator(container)
        >>> orchestrator.execute(ScanConfiguration(modules=(services,), capabilities=(ITestService,)))
    """

    def __init__(self, container: IContainer, type_index: Optional[TypeIndex] = None) -> None:
        self._container = container
        self._type_index = type_index or TypeIndex()

    def execute(self, configuration: ScanConfiguration) -> Optional[RegistrationSummary]:
        return ScanRun(self._container, configuration, self._type_index).execute()
