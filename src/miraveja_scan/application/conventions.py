"""Include/exclude predicate engine and the convention helpers built on it."""

from typing import Any, Callable, List, NamedTuple, Sequence

from miraveja_scan.application.attributes import has_marker
from miraveja_scan.domain import Candidate

Predicate = Callable[[Candidate], bool]


def name_contains(*tokens: str) -> Predicate:
    """Match candidates whose class name contains any of ``tokens``."""

    def predicate(candidate: Candidate) -> bool:
        return any(token in candidate.name for token in tokens)

    return predicate


def has_attribute(marker: Any) -> Predicate:
    """Match candidates tagged with ``marker`` through :func:`~miraveja_scan.application.attributes.attribute`."""

    def predicate(candidate: Candidate) -> bool:
        return has_marker(candidate.attributes, marker)

    return predicate


def derives_from(base: type) -> Predicate:
    """Match candidates that are strict subclasses of ``base``."""

    def predicate(candidate: Candidate) -> bool:
        return base in candidate.base_types

    return predicate


def in_namespace(prefix: str) -> Predicate:
    """Match candidates whose module path starts with ``prefix``."""

    def predicate(candidate: Candidate) -> bool:
        return candidate.namespace.startswith(prefix)

    return predicate


class FilterResult(NamedTuple):
    survivors: List[Candidate]
    excluded: List[Candidate]


class ConventionFilter:
    """Applies OR-combined include predicates, then OR-combined exclude predicates.

    An empty include set keeps every candidate. The order is fixed: excludes are
    evaluated only against the candidates that survived the include stage.
    """

    def __init__(self, include: Sequence[Predicate] = (), exclude: Sequence[Predicate] = ()) -> None:
        self._include = tuple(include)
        self._exclude = tuple(exclude)

    def apply(self, candidates: Sequence[Candidate]) -> FilterResult:
        included = list(candidates)
        if self._include:
            included = [candidate for candidate in included if any(p(candidate) for p in self._include)]

        survivors, excluded = [], []
        for candidate in included:
            if any(p(candidate) for p in self._exclude):
                excluded.append(candidate)
            else:
                survivors.append(candidate)
        return FilterResult(survivors, excluded)
