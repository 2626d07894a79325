"""
couchdoc: CRUD and filtered search over a document store.

DocumentService is the entry point; everything it needs from the store is
described by StoreClient.
"""

from couchdoc.compiler import CompiledQuery, CompiledStatement, QueryCompiler
from couchdoc.consistency import ConsistencyLevel, ScanConsistency
from couchdoc.errors import (
    BadRequest,
    ConfigurationError,
    MalformedFilter,
    NotFound,
    ServiceError,
    UnsupportedOperator,
)
from couchdoc.keys import KeyCodec
from couchdoc.models import Page, PaginationConfig, ServiceOptions
from couchdoc.service import DocumentService
from couchdoc.store import KeyNotFoundError, QueryMeta, QueryResult, StoreClient, StoreError

__all__ = [
    # Service
    "DocumentService",
    "ServiceOptions",
    "PaginationConfig",
    "Page",
    # Query
    "QueryCompiler",
    "CompiledQuery",
    "CompiledStatement",
    "ConsistencyLevel",
    "ScanConsistency",
    "KeyCodec",
    # Store
    "StoreClient",
    "StoreError",
    "KeyNotFoundError",
    "QueryResult",
    "QueryMeta",
    # Errors
    "ServiceError",
    "BadRequest",
    "MalformedFilter",
    "UnsupportedOperator",
    "NotFound",
    "ConfigurationError",
]
