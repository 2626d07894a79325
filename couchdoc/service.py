"""
DocumentService: CRUD and filtered search over one collection.

Documents of a collection share a bucket with other collections; they are
told apart by the `_type` field and keyed as `<name><separator><id>`.

Point operations go straight to the store client. find compiles the
caller's FilterSpec into a read-only statement. patch, update and remove
read the document first and write without any version check, so two
concurrent patches of one id race and the last replace wins.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from couchdoc import consistency, pagination
from couchdoc.compiler import TYPE_FIELD, QueryCompiler
from couchdoc.config import settings
from couchdoc.errors import BadRequest, ConfigurationError, NotFound
from couchdoc.keys import KeyCodec
from couchdoc.models.options import PaginationConfig, ServiceOptions
from couchdoc.models.page import Page
from couchdoc.store import KeyNotFoundError, StoreClient

logger = logging.getLogger(__name__)


class DocumentService:
    """All document operations for one collection."""

    def __init__(
        self,
        *,
        bucket: str,
        connection: StoreClient,
        name: str,
        separator: str | None = None,
        id: str | None = None,
        paginate: Mapping[str, int] | PaginationConfig | None = None,
    ) -> None:
        """
        Args:
            bucket: Bucket the collection lives in
            connection: Store client (required, never defaulted)
            name: Collection name, used for `_type` and key prefixes
            separator: Key separator, default from settings ("::")
            id: Id field name, default from settings ("uuid").
                Do not change for existing data without a migration.
            paginate: {"default": n, "max": m}; omit for bare-list finds

        Raises:
            ConfigurationError: connection missing or options invalid
        """
        if connection is None:
            raise ConfigurationError("Must pass a store connection.")

        overrides: dict[str, Any] = {}
        if separator is not None:
            overrides["separator"] = separator
        if id is not None:
            overrides["id"] = id
        if paginate is not None:
            overrides["paginate"] = paginate
        try:
            self.options = ServiceOptions(bucket=bucket, name=name, **overrides)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid service options: {e}") from e

        self.connection = connection
        self.keys = KeyCodec(self.options.name, self.options.separator)
        self.compiler = QueryCompiler(self.options.bucket)

    @property
    def name(self) -> str:
        return self.options.name

    @property
    def id_field(self) -> str:
        return self.options.id

    @property
    def paginate(self) -> PaginationConfig:
        return self.options.paginate

    # -----------------------------------------------------------------------
    # Search
    # -----------------------------------------------------------------------

    async def find(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]] | Page:
        """
        Run a filtered search over the collection.

        Args:
            params: {"query": FilterSpec, "paginate": optional override}

        Returns:
            List of documents, or a Page when pagination is enabled

        Raises:
            BadRequest: params or query missing, or the query is malformed
        """
        if params is None:
            raise BadRequest("Null passed to find.")
        if not isinstance(params, Mapping):
            raise BadRequest("Params must be a mapping.")
        if params.get("query") is None:
            raise BadRequest("Null query object passed.")
        if not isinstance(params["query"], Mapping):
            raise BadRequest("Query must be a mapping.")

        query = dict(params["query"])
        query[TYPE_FIELD] = self.name
        level = query.pop("$consistency", None)

        policy = pagination.resolve_policy(self.paginate, params.get("paginate"))
        pagination.prepare(policy, query)

        compiled = self.compiler.interpret(self.name, query)
        scan = consistency.resolve(level)

        log = logger.info if settings.LOG_STATEMENTS else logger.debug
        log("find %s: %s (%d params)", self.name, compiled.statement, len(compiled.parameters))

        result = await self.connection.query(
            compiled.statement,
            list(compiled.parameters),
            consistency=scan,
            readonly=True,
        )

        rows = list(result.rows)
        # an empty $select returns full rows
        if compiled.select:
            rows = [_project(row, compiled.select) for row in rows]

        return pagination.wrap(policy, compiled.limit, compiled.skip, rows, result.meta.result_count)

    # -----------------------------------------------------------------------
    # Point operations
    # -----------------------------------------------------------------------

    async def get(self, id: Any, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Fetch one document by id.

        Raises:
            NotFound: nothing stored under the derived key
        """
        key = self.keys.derive_key(id)
        logger.debug("get %s", key)
        try:
            document = await self.connection.get(key)
        except KeyNotFoundError as e:
            raise NotFound(f"No {self.name} with id {id!r}.") from e
        if not document:
            raise NotFound(f"No {self.name} with id {id!r}.")
        return dict(document)

    async def create(self, data: Mapping[str, Any] | None, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Insert a new document, generating an id if data has none.

        Returns:
            The document as a subsequent get returns it
        """
        if data is None:
            raise BadRequest("No data passed to create.")
        if not isinstance(data, Mapping):
            raise BadRequest("Data must be a mapping.")

        document = dict(data)
        document[TYPE_FIELD] = self.name
        id_value = self.keys.ensure_id(document, self.id_field)

        key = self.keys.derive_key(id_value)
        logger.debug("insert %s", key)
        await self.connection.insert(key, document)
        return await self.get(id_value, params)

    async def update(
        self, id: Any, data: Mapping[str, Any] | None, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """Same as patch; there is no separate full-replace path."""
        return await self.patch(id, data, params)

    async def patch(
        self, id: Any, data: Mapping[str, Any] | None, params: Mapping[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Shallow-merge data over the stored document and replace it.

        Keys in data overwrite stored keys, other stored keys are kept.
        `_type` and the stored id field cannot be changed this way.

        Raises:
            BadRequest: data missing or not a mapping
            NotFound: no document with this id
        """
        if data is None:
            raise BadRequest("No data passed to patch.")
        if not isinstance(data, Mapping):
            raise BadRequest("Data must be a mapping.")

        current = await self.get(id, params)
        merged = {**current, **data, TYPE_FIELD: self.name}
        if self.id_field in current:
            merged[self.id_field] = current[self.id_field]

        key = self.keys.derive_key(id)
        logger.debug("replace %s", key)
        await self.connection.replace(key, merged)
        return await self.get(id, params)

    async def remove(self, id: Any, params: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        Delete a document.

        Returns:
            The document as it was before removal

        Raises:
            NotFound: no document with this id (nothing is removed)
        """
        current = await self.get(id, params)
        key = self.keys.derive_key(id)
        logger.debug("remove %s", key)
        await self.connection.remove(key)
        return current


def _project(row: Mapping[str, Any], fields: list[str]) -> dict[str, Any]:
    """Keep only the selected fields that are present in row."""
    return {name: row[name] for name in fields if name in row}
