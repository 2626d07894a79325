"""
Pagination policy for find.

With no `default` configured, find returns a bare list. Otherwise the
limit is defaulted and clamped before the statement is compiled, and the
rows come back wrapped in a Page.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from couchdoc.errors import BadRequest
from couchdoc.filters import non_negative_int
from couchdoc.models.page import Page
from couchdoc.models.options import PaginationConfig


def resolve_policy(service_policy: PaginationConfig, override: Any = None) -> PaginationConfig:
    """
    Pick the policy for one find call.

    Args:
        service_policy: Policy fixed at construction
        override: `params["paginate"]`; None keeps the service policy,
            False disables pagination, a mapping or PaginationConfig replaces it
    """
    if override is None:
        return service_policy
    if override is False:
        return PaginationConfig()
    if isinstance(override, PaginationConfig):
        return override
    if isinstance(override, Mapping):
        try:
            return PaginationConfig(**override)
        except ValueError as e:
            raise BadRequest(f"Invalid paginate override: {e}") from e
    raise BadRequest("paginate must be a mapping or False.")


def prepare(policy: PaginationConfig, query: dict[str, Any]) -> dict[str, Any]:
    """
    Default and clamp `$limit` in place. Runs before compilation so the
    statement's LIMIT is the clamped value.
    """
    if not policy.enabled:
        return query
    limit = query.get("$limit")
    limit = policy.default if limit is None else non_negative_int("$limit", limit)
    if policy.max is not None:
        limit = min(limit, policy.max)
    query["$limit"] = max(0, limit)
    return query


def wrap(
    policy: PaginationConfig,
    limit: int | None,
    skip: int | None,
    rows: list[dict[str, Any]],
    total: int,
) -> list[dict[str, Any]] | Page:
    """Return rows unchanged, or a Page when pagination is enabled."""
    if not policy.enabled:
        return rows
    return Page(total=total, limit=limit, skip=skip or 0, data=rows)
