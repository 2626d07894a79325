"""Pagination envelope returned by find."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Page(BaseModel):
    """One page of find results plus the total match count."""

    total: int
    limit: int | None
    skip: int = 0
    data: list[dict[str, Any]] = Field(default_factory=list)
