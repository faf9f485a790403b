"""Unit tests for CircularDependencyDetector."""

import threading
from typing import Generic, TypeVar

import pytest

from miraveja_scan.application.circular_detector import CircularDependencyDetector
from miraveja_scan.domain import CircularDependencyError

T = TypeVar("T")


class ServiceA:
    pass


class ServiceB:
    pass


class Box(Generic[T]):
    pass


class TestCircularDependencyDetector:
    """Test cases for CircularDependencyDetector."""

    def test_push_detects_cycle(self):
        """Test that pushing a type twice raises with the cycle."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        detector.push(ServiceB)

        with pytest.raises(CircularDependencyError) as exc_info:
            detector.push(ServiceA)

        assert exc_info.value.dependency_chain == [ServiceA, ServiceB, ServiceA]

    def test_pop_allows_reentry(self):
        """Test that popped types can be pushed again."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        detector.pop()
        detector.push(ServiceA)

    def test_aliases_are_distinct_from_origin(self):
        """Test that closed aliases and their origin do not collide."""
        detector = CircularDependencyDetector()
        detector.push(Box)
        detector.push(Box[int])
        detector.push(Box[str])

    def test_stacks_are_thread_local(self):
        """Test that other threads have their own stack."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        errors = []

        def worker():
            try:
                detector.push(ServiceA)
            except CircularDependencyError as e:
                errors.append(e)

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        assert errors == []

    def test_clear(self):
        """Test clearing the stack."""
        detector = CircularDependencyDetector()
        detector.push(ServiceA)
        detector.clear()
        detector.push(ServiceA)


class TestResolvingContext:
    """Test cases for the resolving context manager."""

    def test_nested_resolution_of_same_type_raises(self):
        """Test that re-entering a type inside its own block is a cycle."""
        detector = CircularDependencyDetector()

        with detector.resolving(ServiceA):
            with detector.resolving(ServiceB):
                with pytest.raises(CircularDependencyError) as exc_info:
                    with detector.resolving(ServiceA):
                        pass

        assert exc_info.value.dependency_chain == [ServiceA, ServiceB, ServiceA]

    def test_type_is_released_after_block(self):
        """Test that sequential resolutions of a type are allowed."""
        detector = CircularDependencyDetector()

        with detector.resolving(ServiceA):
            pass
        with detector.resolving(ServiceA):
            pass

    def test_type_is_released_when_block_fails(self):
        """Test that an error inside the block still pops the type."""
        detector = CircularDependencyDetector()

        with pytest.raises(ValueError):
            with detector.resolving(ServiceA):
                raise ValueError("boom")

        with detector.resolving(ServiceA):
            pass

    def test_failed_entry_leaves_outer_stack_intact(self):
        """Test that a detected cycle does not pop the outer entry."""
        detector = CircularDependencyDetector()

        with detector.resolving(ServiceA):
            with pytest.raises(CircularDependencyError):
                with detector.resolving(ServiceA):
                    pass
            with pytest.raises(CircularDependencyError):
                detector.push(ServiceA)
