"""
FilterSpec -> statement compiler.

Produces statements of the form

    SELECT `bucket`.* FROM `bucket`
    WHERE _type = $1 AND age >= $2 AND (name = $3 OR name = $4)
    ORDER BY age DESC LIMIT $5 OFFSET $6

Every value from the filter is bound as a positional parameter. Field
names and the bucket name are written into the text as given and are NOT
escaped; callers must not pass untrusted field names.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from couchdoc.filters import (
    Comparison,
    Disjunction,
    Equality,
    Membership,
    ParsedFilter,
    Predicate,
    SortKey,
    parse_filter,
)

TYPE_FIELD = "_type"


@dataclass(frozen=True)
class CompiledStatement:
    """Statement text and the values bound to $1..$n, in order."""

    statement: str
    parameters: tuple[Any, ...]


@dataclass(frozen=True)
class CompiledQuery:
    """A compiled statement plus the directives it does not express."""

    compiled: CompiledStatement
    limit: int | None = None
    skip: int | None = None
    select: list[str] | None = None
    consistency: Any = None

    @property
    def statement(self) -> str:
        return self.compiled.statement

    @property
    def parameters(self) -> tuple[Any, ...]:
        return self.compiled.parameters


class _Parameters:
    """Collects bound values and hands out their placeholders."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def bind(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


class QueryCompiler:
    """Compiles FilterSpecs into read statements over one bucket."""

    def __init__(self, bucket: str) -> None:
        self.bucket = bucket

    def interpret(self, collection: str, spec: Mapping[str, Any]) -> CompiledQuery:
        """
        Compile a FilterSpec scoped to one collection.

        Args:
            collection: Value of the implicit `_type` predicate
            spec: FilterSpec mapping

        Returns:
            CompiledQuery with statement, parameters and extracted directives

        Raises:
            MalformedFilter, UnsupportedOperator: from parse_filter
        """
        parsed = parse_filter(spec)
        params = _Parameters()

        conditions = [f"{TYPE_FIELD} = {params.bind(collection)}"]
        for predicate in parsed.predicates:
            # the collection predicate above always wins
            if isinstance(predicate, Equality) and predicate.field == TYPE_FIELD:
                continue
            conditions.append(self._predicate(predicate, params))

        # S608: only placeholders and unescaped names reach the text
        parts = [
            f"SELECT `{self.bucket}`.* FROM `{self.bucket}`",  # noqa: S608
            "WHERE " + " AND ".join(conditions),
        ]
        if parsed.sort:
            parts.append(self._order_by(parsed.sort))
        parts.extend(self._paging(parsed, params))

        return CompiledQuery(
            compiled=CompiledStatement(" ".join(parts), tuple(params.values)),
            limit=parsed.limit,
            skip=parsed.skip,
            select=parsed.select,
            consistency=parsed.consistency,
        )

    def _predicate(self, predicate: Predicate, params: _Parameters) -> str:
        if isinstance(predicate, Equality):
            return f"{predicate.field} = {params.bind(predicate.value)}"
        if isinstance(predicate, Comparison):
            return f"{predicate.field} {predicate.operator} {params.bind(predicate.value)}"
        if isinstance(predicate, Membership):
            return f"{predicate.field} {predicate.operator} {params.bind(predicate.values)}"
        if isinstance(predicate, Disjunction):
            branches = []
            for branch in predicate.branches:
                terms = [self._predicate(p, params) for p in branch]
                branches.append(terms[0] if len(terms) == 1 else "(" + " AND ".join(terms) + ")")
            return "(" + " OR ".join(branches) + ")"
        raise TypeError(f"Unknown predicate: {predicate!r}")

    @staticmethod
    def _order_by(sort: list[SortKey]) -> str:
        keys = ", ".join(f"{key.field} {'DESC' if key.descending else 'ASC'}" for key in sort)
        return f"ORDER BY {keys}"

    @staticmethod
    def _paging(parsed: ParsedFilter, params: _Parameters) -> list[str]:
        clauses = []
        if parsed.limit is not None:
            clauses.append(f"LIMIT {params.bind(parsed.limit)}")
        if parsed.skip is not None:
            clauses.append(f"OFFSET {params.bind(parsed.skip)}")
        return clauses
