"""
Filter parsing: turns a FilterSpec mapping into a predicate tree.

A FilterSpec is what callers pass as `params["query"]` to find:

    {"name": "ada", "age": {"$gte": 18}, "$sort": {"age": -1}, "$limit": 10}

Bare values are equality predicates, mappings with `$` keys are operator
mappings, and the reserved `$` keys are directives that never become
predicates. The compiler only ever sees the tree built here.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Union

from couchdoc.errors import MalformedFilter, UnsupportedOperator

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

DIRECTIVE_KEYS: frozenset[str] = frozenset({"$limit", "$skip", "$select", "$sort", "$consistency"})
OR_KEY = "$or"
RESERVED_KEYS: frozenset[str] = DIRECTIVE_KEYS | {OR_KEY}

COMPARISON_OPERATORS: dict[str, str] = {
    "$lt": "<",
    "$lte": "<=",
    "$gt": ">",
    "$gte": ">=",
    "$ne": "!=",
}

MEMBERSHIP_OPERATORS: dict[str, str] = {
    "$in": "IN",
    "$nin": "NOT IN",
}


# ---------------------------------------------------------------------------
# Predicate tree
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Equality:
    field: str
    value: Any


@dataclass(frozen=True)
class Comparison:
    field: str
    operator: str  # statement symbol, e.g. "<="
    value: Any


@dataclass(frozen=True)
class Membership:
    field: str
    operator: str  # "IN" or "NOT IN"
    values: list[Any]


@dataclass(frozen=True)
class Disjunction:
    """OR of branches; each branch is an AND of predicates."""

    branches: tuple[tuple[Predicate, ...], ...]


Predicate = Union[Equality, Comparison, Membership, Disjunction]


@dataclass(frozen=True)
class SortKey:
    field: str
    descending: bool = False


@dataclass
class ParsedFilter:
    """Predicates plus the directives pulled out of a FilterSpec."""

    predicates: list[Predicate] = field(default_factory=list)
    limit: int | None = None
    skip: int | None = None
    select: list[str] | None = None
    sort: list[SortKey] = field(default_factory=list)
    consistency: Any = None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_filter(spec: Mapping[str, Any]) -> ParsedFilter:
    """
    Parse a FilterSpec. Predicates keep the spec's insertion order.

    Raises:
        MalformedFilter: a directive or `$or` has the wrong shape
        UnsupportedOperator: an operator mapping has an unknown `$` key
    """
    if not isinstance(spec, Mapping):
        raise MalformedFilter("Query must be a mapping.")

    parsed = ParsedFilter()
    for key, value in spec.items():
        if key == "$limit":
            parsed.limit = non_negative_int(key, value)
        elif key == "$skip":
            parsed.skip = non_negative_int(key, value)
        elif key == "$select":
            parsed.select = _parse_select(value)
        elif key == "$sort":
            parsed.sort = _parse_sort(value)
        elif key == "$consistency":
            parsed.consistency = value
        elif key == OR_KEY:
            parsed.predicates.append(_parse_or(value))
        else:
            parsed.predicates.extend(_field_predicates(key, value))
    return parsed


def is_operator_mapping(value: Any) -> bool:
    """A mapping is an operator mapping when any key starts with `$`."""
    return isinstance(value, Mapping) and any(isinstance(k, str) and k.startswith("$") for k in value)


def _field_predicates(field_name: str, value: Any) -> list[Predicate]:
    if not is_operator_mapping(value):
        return [Equality(field_name, value)]

    predicates: list[Predicate] = []
    for op, operand in value.items():
        if op in COMPARISON_OPERATORS:
            predicates.append(Comparison(field_name, COMPARISON_OPERATORS[op], operand))
        elif op in MEMBERSHIP_OPERATORS:
            if not isinstance(operand, (list, tuple)):
                raise MalformedFilter(f"{op} on {field_name!r} needs a list of values.")
            predicates.append(Membership(field_name, MEMBERSHIP_OPERATORS[op], list(operand)))
        elif op == OR_KEY:
            branches = _or_branches(operand)
            predicates.append(
                Disjunction(tuple(tuple(_field_predicates(field_name, branch)) for branch in branches))
            )
        else:
            raise UnsupportedOperator(op, field_name)
    return predicates


def _parse_or(value: Any) -> Disjunction:
    branches = []
    for branch in _or_branches(value):
        if not isinstance(branch, Mapping):
            raise MalformedFilter("Each $or clause must be a mapping.")
        predicates: list[Predicate] = []
        for key, sub in branch.items():
            if key in DIRECTIVE_KEYS:
                raise MalformedFilter(f"{key} is not allowed inside $or.")
            if key == OR_KEY:
                predicates.append(_parse_or(sub))
            else:
                predicates.extend(_field_predicates(key, sub))
        branches.append(tuple(predicates))
    return Disjunction(tuple(branches))


def _or_branches(value: Any) -> Sequence[Any]:
    if not isinstance(value, (list, tuple)):
        raise MalformedFilter("$or needs a list of clauses.")
    if not value:
        raise MalformedFilter("$or needs at least one clause.")
    if any(isinstance(branch, Mapping) and not branch for branch in value):
        raise MalformedFilter("$or clauses must not be empty.")
    return value


def non_negative_int(key: str, value: Any) -> int:
    # Query strings deliver numbers as text; ASCII only, int() rejects "²"
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise MalformedFilter(f"{key} must be a non-negative integer.")
    return value


def _parse_select(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)) or not all(isinstance(f, str) for f in value):
        raise MalformedFilter("$select must be a list of field names.")
    return list(value)


def _parse_sort(value: Any) -> list[SortKey]:
    if not isinstance(value, Mapping):
        raise MalformedFilter("$sort must map field names to directions.")
    return [SortKey(name, _is_descending(name, direction)) for name, direction in value.items()]


def _is_descending(name: str, direction: Any) -> bool:
    if isinstance(direction, str):
        lowered = direction.strip().lower()
        if lowered in ("asc", "desc"):
            return lowered == "desc"
        try:
            direction = int(lowered)
        except ValueError:
            pass
    if isinstance(direction, int) and not isinstance(direction, bool) and direction != 0:
        return direction < 0
    raise MalformedFilter(f"Invalid sort direction for {name!r}: {direction!r}.")
