from typing import Any, Optional

from miraveja_scan.application.diagnostics import Diagnostics
from miraveja_scan.domain import (
    IContainer,
    Lifetime,
    Mapping,
    RegistrationStrategy,
    RegistrationSummary,
    type_name,
)


class RegistrationResolver:
    """Adds scanned mappings to a container under a conflict strategy.

    The summary records every attempted registration, including the ones a
    ``SKIP`` strategy leaves out. The container's mappings are the source of
    truth for what is actually resolvable.

    Attributes:
        _container: Container whose mappings are mutated.
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

    def register(
        self,
        service_type: Any,
        implementation_type: type,
        lifetime: Lifetime,
        strategy: RegistrationStrategy,
    ) -> Optional[Mapping]:
        """Register ``implementation_type`` for ``service_type``.

        Args:
            service_type: The service type to map.
            implementation_type: The concrete class to construct.
            lifetime: Lifetime of the new mapping.
            strategy: How to treat mappings already registered for ``service_type``.

        Returns:
            The added mapping, or ``None`` when ``SKIP`` left the container untouched.
        """
        existing = self._container.get_mappings(service_type)
        record = f"{type_name(service_type)} → {type_name(implementation_type)}"

        if self._summary is not None:
            self._summary.registered.append(record)

        if strategy == RegistrationStrategy.SKIP and existing:
            self._diagnostics.log(f"Skipping registration of {record} (already registered)")
            return None

        if strategy == RegistrationStrategy.REPLACE:
            for mapping in existing:
                self._diagnostics.log(f"Replacing existing registration {mapping}")
                self._container.remove(mapping)

        self._diagnostics.log(f"Registering {record} as {lifetime.value}")
        mapping = Mapping(service_type=service_type, implementation_type=implementation_type, lifetime=lifetime)
        self._container.add(mapping)
        return mapping
