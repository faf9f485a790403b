"""Unit tests for ScanOrchestrator and ScanRun."""

import pytest
from scan_fixtures import basic, closed_generics, conventions, other

from miraveja_scan.application.container import DIContainer
from miraveja_scan.application.conventions import name_contains
from miraveja_scan.application.decoration import DecoratorPipelineBuilder
from miraveja_scan.application.orchestrator import ScanOrchestrator, ScanRun
from miraveja_scan.application.type_index import TypeIndex
from miraveja_scan.domain import (
    ConfigurationError,
    Lifetime,
    RegistrationStrategy,
    RegistrationSummary,
    ScanConfiguration,
    ScanState,
)


def pipeline(*decorator_types):
    builder = DecoratorPipelineBuilder()
    for decorator_type in decorator_types:
        builder.use(decorator_type)
    return builder.build()


def implementations(container, service_type):
    return [mapping.implementation_type for mapping in container.get_mappings(service_type)]


class TestScanRun:
    """Test cases for ScanRun."""

    def test_state_machine(self):
        """Test that a run starts idle and ends done."""
        run = ScanRun(DIContainer(), ScanConfiguration(modules=(basic,), capabilities=(basic.ITestService,)))

        assert run.state == ScanState.IDLE
        run.execute()
        assert run.state == ScanState.DONE

    def test_run_cannot_execute_twice(self):
        """Test that DONE is terminal."""
        run = ScanRun(DIContainer(), ScanConfiguration())
        run.execute()

        with pytest.raises(ConfigurationError, match="create a new run"):
            run.execute()

    def test_returns_summary(self):
        """Test that the configured summary is returned."""
        summary = RegistrationSummary()

        result = ScanRun(DIContainer(), ScanConfiguration(summary=summary)).execute()

        assert result is summary

    def test_returns_none_without_summary(self):
        """Test that no summary is created implicitly."""
        assert ScanRun(DIContainer(), ScanConfiguration()).execute() is None


class TestScanOrchestrator:
    """Test cases for ScanOrchestrator."""

    def test_registers_every_survivor(self):
        """Test registration of all discovered implementations."""
        container = DIContainer()

        ScanOrchestrator(container).execute(
            ScanConfiguration(modules=(basic,), capabilities=(basic.ITestService,))
        )

        assert implementations(container, basic.ITestService) == [basic.TestService, basic.AnotherTestService]

    def test_lifetime_is_applied(self):
        """Test that mappings use the configured lifetime."""
        container = DIContainer()

        ScanOrchestrator(container).execute(
            ScanConfiguration(modules=(basic,), capabilities=(basic.ITestService,), lifetime=Lifetime.SINGLETON)
        )

        assert {m.lifetime for m in container.get_mappings(basic.ITestService)} == {Lifetime.SINGLETON}

    def test_modules_and_capabilities_in_declared_order(self):
        """Test that pairs are processed module by module, capability by capability."""
        container = DIContainer()
        summary = RegistrationSummary()

        ScanOrchestrator(container).execute(
            ScanConfiguration(
                modules=(other, basic),
                capabilities=(basic.ITestService, basic.IMultiModuleService),
                summary=summary,
            )
        )

        assert summary.modules == ["scan_fixtures.other", "scan_fixtures.basic"]
        assert summary.capabilities == [
            "scan_fixtures.basic.ITestService",
            "scan_fixtures.basic.IMultiModuleService",
        ] * 2
        assert implementations(container, basic.ITestService) == [
            other.OtherTestService,
            basic.TestService,
            basic.AnotherTestService,
        ]

    def test_open_generic_registers_definition(self):
        """Test that open generic implementations register under the definition."""
        container = DIContainer()

        ScanOrchestrator(container).execute(
            ScanConfiguration(modules=(basic, closed_generics), capabilities=(basic.IGenericService,))
        )

        assert implementations(container, basic.IGenericService) == [basic.GenericService]
        assert implementations(container, basic.IGenericService[int]) == [closed_generics.IntGenericService]

    def test_excluded_candidates_are_reported(self):
        """Test the excluded list of the summary."""
        summary = RegistrationSummary()

        ScanOrchestrator(DIContainer()).execute(
            ScanConfiguration(
                modules=(conventions,),
                capabilities=(basic.ITestService,),
                exclude_predicates=(name_contains("Processor"),),
                summary=summary,
            )
        )

        assert summary.excluded == ["DerivedProcessor"]
        assert summary.registered == [
            "ITestService → AttributeBasedService",
            "ITestService → NameConventionService",
        ]

    def test_strategy_is_forwarded(self):
        """Test that SKIP keeps mappings registered before the scan."""
        container = DIContainer()
        container.register_scoped({basic.ITestService: lambda c: basic.AnotherTestService()})

        ScanOrchestrator(container).execute(
            ScanConfiguration(
                modules=(basic,),
                capabilities=(basic.ITestService,),
                strategy=RegistrationStrategy.SKIP,
            )
        )

        assert len(container.get_mappings(basic.ITestService)) == 1

    def test_diagnostics_sink(self):
        """Test that decision lines reach the diagnostics callback."""
        lines = []

        ScanOrchestrator(DIContainer()).execute(
            ScanConfiguration(modules=(basic,), capabilities=(basic.ITestService,), diagnostics=lines.append)
        )

        assert lines[0] == "Scanning module: scan_fixtures.basic"
        assert "Scanning for interface: scan_fixtures.basic.ITestService" in lines
        assert "Registering ITestService → TestService as scoped" in lines

    def test_type_index_is_reused(self):
        """Test that the orchestrator queries its own index."""
        index = TypeIndex()
        orchestrator = ScanOrchestrator(DIContainer(), index)

        orchestrator.execute(ScanConfiguration(modules=(basic,), capabilities=(basic.ITestService,)))

        assert "scan_fixtures.basic" in index._modules

    def test_each_execute_is_a_new_run(self):
        """Test that the same orchestrator can execute several configurations."""
        container = DIContainer()
        orchestrator = ScanOrchestrator(container)
        configuration = ScanConfiguration(modules=(basic,), capabilities=(basic.ITestService,))

        orchestrator.execute(configuration)
        orchestrator.execute(configuration)

        assert len(container.get_mappings(basic.ITestService)) == 4


class TestPipelineGuards:
    """Test cases for the decoration guards of a run."""

    def test_single_survivor_is_decorated(self):
        """Test that the pipeline applies to the sole implementation."""
        container = DIContainer()

        ScanOrchestrator(container).execute(
            ScanConfiguration(
                modules=(basic,),
                capabilities=(basic.ITestService,),
                include_predicates=(lambda c: c.name == "TestService",),
                decorators=pipeline(basic.ValidationDecorator, basic.LoggingDecorator),
            )
        )

        instance = container.resolve(basic.ITestService)
        assert isinstance(instance, basic.ValidationDecorator)
        assert isinstance(instance.inner.inner, basic.TestService)

    def test_multiple_survivors_fail(self):
        """Test the configuration error naming the capability."""
        container = DIContainer()

        with pytest.raises(ConfigurationError, match="ITestService with multiple implementations") as exc_info:
            ScanOrchestrator(container).execute(
                ScanConfiguration(
                    modules=(basic,),
                    capabilities=(basic.ITestService,),
                    decorators=pipeline(basic.LoggingDecorator),
                )
            )

        assert exc_info.value.service_type is basic.ITestService
        # registrations made before the failure are kept
        assert len(container.get_mappings(basic.ITestService)) == 2

    def test_open_generic_capability_is_not_decorated(self):
        """Test that open generic capabilities skip the pipeline silently."""
        container = DIContainer()
        lines = []

        ScanOrchestrator(container).execute(
            ScanConfiguration(
                modules=(basic, closed_generics),
                capabilities=(basic.IGenericService,),
                decorators=pipeline(basic.LoggingDecorator),
                diagnostics=lines.append,
            )
        )

        assert isinstance(container.resolve(basic.IGenericService[str]), basic.GenericService)
        assert "Skipping decorator pipeline for open generic IGenericService" in lines

    def test_zero_survivors_is_not_an_error(self):
        """Test that a capability without implementations is skipped."""
        container = DIContainer()

        ScanOrchestrator(container).execute(
            ScanConfiguration(
                modules=(basic,),
                capabilities=(basic.ITestService,),
                include_predicates=(lambda c: False,),
                decorators=pipeline(basic.LoggingDecorator),
            )
        )

        assert container.get_all_mappings() == []
