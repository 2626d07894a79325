"""
Store client contract.

DocumentService talks to the document store only through StoreClient.
Implement it over the real SDK in production, or in memory for tests.
The service never constructs a client itself; one must be injected.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from couchdoc.consistency import ScanConsistency


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class StoreError(Exception):
    """Base class for failures surfaced by a store client."""

    pass


class KeyNotFoundError(StoreError):
    """Point operation addressed a key that holds no document."""

    pass


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QueryMeta:
    """Metadata returned alongside query rows."""

    result_count: int = 0


@dataclass(frozen=True)
class QueryResult:
    """Rows plus metadata for one executed statement."""

    rows: list[dict[str, Any]] = field(default_factory=list)
    meta: QueryMeta = field(default_factory=QueryMeta)


# ---------------------------------------------------------------------------
# Client protocol
# ---------------------------------------------------------------------------


class StoreClient:
    """
    Abstract store interface.

    Every method is a coroutine so outstanding requests from concurrent
    service calls never block each other.
    """

    async def get(self, key: str) -> dict[str, Any] | None:
        """Fetch the document at key. Raise KeyNotFoundError or return None if absent."""
        raise NotImplementedError

    async def insert(self, key: str, document: dict[str, Any]) -> None:
        """Store a new document. Fails if key already exists."""
        raise NotImplementedError

    async def replace(self, key: str, document: dict[str, Any]) -> None:
        """Overwrite an existing document."""
        raise NotImplementedError

    async def remove(self, key: str) -> None:
        """Delete the document at key."""
        raise NotImplementedError

    async def query(
        self,
        statement: str,
        parameters: Sequence[Any],
        *,
        consistency: ScanConsistency | None = None,
        readonly: bool = False,
    ) -> QueryResult:
        """
        Execute a statement with positional parameters ($1..$n).

        Args:
            statement: Statement text
            parameters: Values bound to $1..$n, in order
            consistency: Scan consistency, None for the store default
            readonly: Ask the store to reject mutating statements

        Returns:
            QueryResult with rows and metadata
        """
        raise NotImplementedError
