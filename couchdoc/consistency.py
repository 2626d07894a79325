"""
Query consistency levels.

ConsistencyLevel is what callers put in `$consistency`. ScanConsistency is
the value the statement service understands (its `scan_consistency`
request parameter). Only find statements carry one.
"""

from __future__ import annotations

import logging
from enum import Enum

logger = logging.getLogger(__name__)


class ConsistencyLevel(Enum):
    """How fresh the index consulted by a find must be."""

    UNSPECIFIED = "UNSPECIFIED"
    NOT_BOUNDED = "NOT_BOUNDED"  # no index wait, may miss recent writes
    REQUEST_PLUS = "REQUEST_PLUS"  # wait for this node's mutations
    STATEMENT_PLUS = "STATEMENT_PLUS"  # wait for cluster-wide mutations


class ScanConsistency(str, Enum):
    """Native scan_consistency values."""

    NOT_BOUNDED = "not_bounded"
    REQUEST_PLUS = "request_plus"
    STATEMENT_PLUS = "statement_plus"


_NATIVE: dict[ConsistencyLevel, ScanConsistency | None] = {
    ConsistencyLevel.UNSPECIFIED: None,
    ConsistencyLevel.NOT_BOUNDED: ScanConsistency.NOT_BOUNDED,
    ConsistencyLevel.REQUEST_PLUS: ScanConsistency.REQUEST_PLUS,
    ConsistencyLevel.STATEMENT_PLUS: ScanConsistency.STATEMENT_PLUS,
}


def coerce_level(value: object) -> ConsistencyLevel:
    """
    Turn a `$consistency` value into a ConsistencyLevel.

    Accepts a member or its name. Anything else is UNSPECIFIED.
    """
    if value is None:
        return ConsistencyLevel.UNSPECIFIED
    if isinstance(value, ConsistencyLevel):
        return value
    if isinstance(value, str) and value.upper() in ConsistencyLevel.__members__:
        return ConsistencyLevel[value.upper()]
    logger.warning("Unrecognised consistency %r, using store default", value)
    return ConsistencyLevel.UNSPECIFIED


def resolve(level: object) -> ScanConsistency | None:
    """
    Map a consistency level to the store's native setting.

    Returns:
        ScanConsistency, or None to leave the store default in place
    """
    return _NATIVE[coerce_level(level)]
