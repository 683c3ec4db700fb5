"""
Declarative visibility predicates.

A predicate is plain data: a tree of clause values (equals, not-equals,
regex match, conjunction, disjunction, whole negation) interpreted by
`Predicate.evaluate`. Field values are supplied by a lookup callable so
the predicate language can be exercised without any field model.

Mappings in the router form notation are accepted through `depends`:

    depends({'routing_mode': 'custom', '!reverse': True})

means "NOT (routing_mode == 'custom')" applied to the whole mapping, not
a clause-by-clause negation.
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Mapping, Optional, Pattern, Tuple, Union

CURRENT = "current"
REVERSE_KEY = "!reverse"


@dataclass(frozen=True)
class FieldRef:
    """
    Address of a field value a predicate depends on.

    ``section_type`` of None means the section type of the field being
    evaluated; ``section_id`` of CURRENT means the section being evaluated.
    """
    key: str
    section_type: Optional[str] = None
    section_id: str = CURRENT

    @classmethod
    def parse(cls, path: str) -> "FieldRef":
        """
        Parse ``key``, ``<singleton>.key`` or ``<type>.<id>.key``.

        Singleton sections use their type name as identifier, so
        ``config.proxy_mode`` addresses section ``config`` of type ``config``.
        """
        parts = path.split('.')
        if len(parts) == 1:
            return cls(parts[0])
        if len(parts) == 2:
            return cls(parts[1], parts[0], parts[0])
        if len(parts) == 3:
            return cls(parts[2], parts[0], parts[1])
        raise ValueError(f"Invalid field reference: {path!r}")

    def __str__(self):
        if self.section_type is None:
            return self.key
        return f"{self.section_type}.{self.section_id}.{self.key}"


Lookup = Callable[[FieldRef], Any]


def _as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ' '.join(str(v) for v in value)
    return str(value)


class Predicate:
    """Base class of every clause kind."""

    def evaluate(self, lookup: Lookup) -> bool:
        raise NotImplementedError

    def refs(self) -> Iterator[FieldRef]:
        return iter(())

    def __and__(self, other: "Predicate") -> "Predicate":
        return AllOf((self, other))

    def __or__(self, other: "Predicate") -> "Predicate":
        return AnyOf((self, other))

    def __invert__(self) -> "Predicate":
        return Not(self)


@dataclass(frozen=True)
class Always(Predicate):
    def evaluate(self, lookup: Lookup) -> bool:
        return True


@dataclass(frozen=True)
class Equals(Predicate):
    """True when the referenced value is present and equal to ``value``."""
    ref: FieldRef
    value: str

    def evaluate(self, lookup: Lookup) -> bool:
        actual = _as_text(lookup(self.ref))
        return actual is not None and actual == self.value

    def refs(self) -> Iterator[FieldRef]:
        yield self.ref


@dataclass(frozen=True)
class NotEquals(Predicate):
    """True when the referenced value is absent or differs from ``value``."""
    ref: FieldRef
    value: str

    def evaluate(self, lookup: Lookup) -> bool:
        return _as_text(lookup(self.ref)) != self.value

    def refs(self) -> Iterator[FieldRef]:
        yield self.ref


@dataclass(frozen=True)
class Matches(Predicate):
    """True when the referenced value is present and the pattern is found in it."""
    ref: FieldRef
    pattern: Pattern

    def evaluate(self, lookup: Lookup) -> bool:
        actual = _as_text(lookup(self.ref))
        return actual is not None and self.pattern.search(actual) is not None

    def refs(self) -> Iterator[FieldRef]:
        yield self.ref


@dataclass(frozen=True)
class AllOf(Predicate):
    clauses: Tuple[Predicate, ...]

    def evaluate(self, lookup: Lookup) -> bool:
        return all(clause.evaluate(lookup) for clause in self.clauses)

    def refs(self) -> Iterator[FieldRef]:
        for clause in self.clauses:
            yield from clause.refs()


@dataclass(frozen=True)
class AnyOf(Predicate):
    clauses: Tuple[Predicate, ...]

    def evaluate(self, lookup: Lookup) -> bool:
        return any(clause.evaluate(lookup) for clause in self.clauses)

    def refs(self) -> Iterator[FieldRef]:
        for clause in self.clauses:
            yield from clause.refs()


@dataclass(frozen=True)
class Not(Predicate):
    """Whole negation of the wrapped clause."""
    clause: Predicate

    def evaluate(self, lookup: Lookup) -> bool:
        return not self.clause.evaluate(lookup)

    def refs(self) -> Iterator[FieldRef]:
        yield from self.clause.refs()


ALWAYS = Always()


@dataclass(frozen=True)
class ne:
    """Marker for a negated literal inside a `depends` mapping."""
    value: str


ClauseValue = Union[str, Pattern, ne]


def _clause(path: str, expected: ClauseValue) -> Predicate:
    ref = FieldRef.parse(path)
    if isinstance(expected, ne):
        return NotEquals(ref, expected.value)
    if isinstance(expected, re.Pattern):
        return Matches(ref, expected)
    return Equals(ref, str(expected))


def depends(mapping: Mapping[str, Any]) -> Predicate:
    """Build a conjunctive predicate from one form-notation mapping."""
    clauses = tuple(_clause(path, expected) for path, expected in mapping.items()
                    if path != REVERSE_KEY)
    if not clauses:
        raise ValueError("A dependency mapping needs at least one clause")
    predicate = clauses[0] if len(clauses) == 1 else AllOf(clauses)
    if mapping.get(REVERSE_KEY):
        predicate = Not(predicate)
    return predicate


def depends_any(*mappings: Mapping[str, Any]) -> Predicate:
    """Disjunction of several mappings, one per alternative."""
    predicates = tuple(depends(m) for m in mappings)
    return predicates[0] if len(predicates) == 1 else AnyOf(predicates)


def when(path: str, *values: str) -> Predicate:
    """Shorthand for "field equals one of values"."""
    return depends_any(*({path: v} for v in values))
