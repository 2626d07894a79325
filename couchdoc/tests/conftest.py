"""
Pytest configuration and fixtures for couchdoc tests.

RecordingStore stands in for the document store: point operations hit a
dict, queries pop canned results and record what was sent.
"""

from __future__ import annotations

import copy
from collections import deque
from collections.abc import Sequence
from typing import Any

import pytest

from couchdoc.consistency import ScanConsistency
from couchdoc.service import DocumentService
from couchdoc.store import KeyNotFoundError, QueryMeta, QueryResult, StoreClient, StoreError


class RecordingStore(StoreClient):
    """In-memory store for testing."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.responses: deque[QueryResult] = deque()
        self.queries: list[dict[str, Any]] = []
        self.calls: list[tuple[str, str]] = []

    def add_response(self, rows: list[dict[str, Any]], result_count: int | None = None) -> None:
        count = len(rows) if result_count is None else result_count
        self.responses.append(QueryResult(rows=rows, meta=QueryMeta(result_count=count)))

    async def get(self, key: str) -> dict[str, Any] | None:
        self.calls.append(("get", key))
        if key not in self.documents:
            raise KeyNotFoundError(key)
        return copy.deepcopy(self.documents[key])

    async def insert(self, key: str, document: dict[str, Any]) -> None:
        self.calls.append(("insert", key))
        if key in self.documents:
            raise StoreError(f"Document exists: {key}")
        self.documents[key] = copy.deepcopy(document)

    async def replace(self, key: str, document: dict[str, Any]) -> None:
        self.calls.append(("replace", key))
        if key not in self.documents:
            raise KeyNotFoundError(key)
        self.documents[key] = copy.deepcopy(document)

    async def remove(self, key: str) -> None:
        self.calls.append(("remove", key))
        if key not in self.documents:
            raise KeyNotFoundError(key)
        del self.documents[key]

    async def query(
        self,
        statement: str,
        parameters: Sequence[Any],
        *,
        consistency: ScanConsistency | None = None,
        readonly: bool = False,
    ) -> QueryResult:
        self.queries.append(
            {
                "statement": statement,
                "parameters": list(parameters),
                "consistency": consistency,
                "readonly": readonly,
            }
        )
        if not self.responses:
            raise StoreError("TEST-ERROR :: No data in queue")
        return self.responses.popleft()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def service(store) -> DocumentService:
    """Service over the `users` collection without pagination."""
    return DocumentService(bucket="testbucket", connection=store, name="users", id="uuid", paginate={})


@pytest.fixture
def paginated_service(store) -> DocumentService:
    """Service over the `users` collection paginating 10 by default, 50 at most."""
    return DocumentService(
        bucket="testbucket",
        connection=store,
        name="users",
        id="uuid",
        paginate={"default": 10, "max": 50},
    )
