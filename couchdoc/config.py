"""
couchdoc configuration. All environment variables in one place.

Read from environment at import time. These are service-wide defaults;
options passed to DocumentService always take precedence.
"""

from __future__ import annotations

import os


def _optional_int(name: str) -> int | None:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from None


class Settings:
    """Service defaults from environment variables."""

    # Keys
    KEY_SEPARATOR: str = os.environ.get("COUCHDOC_KEY_SEPARATOR", "::")
    ID_FIELD: str = os.environ.get("COUCHDOC_ID_FIELD", "uuid")

    # Pagination (both unset = find returns bare lists)
    PAGINATE_DEFAULT: int | None = _optional_int("COUCHDOC_PAGINATE_DEFAULT")
    PAGINATE_MAX: int | None = _optional_int("COUCHDOC_PAGINATE_MAX")

    # Logging
    LOG_STATEMENTS: bool = os.environ.get("COUCHDOC_LOG_STATEMENTS", "").lower() == "true"

    @property
    def PAGINATE(self) -> dict[str, int]:
        paginate = {}
        if self.PAGINATE_DEFAULT is not None:
            paginate["default"] = self.PAGINATE_DEFAULT
        if self.PAGINATE_MAX is not None:
            paginate["max"] = self.PAGINATE_MAX
        return paginate


# Singleton instance
settings = Settings()

if not settings.KEY_SEPARATOR:
    raise RuntimeError("COUCHDOC_KEY_SEPARATOR must not be empty")
if not settings.ID_FIELD:
    raise RuntimeError("COUCHDOC_ID_FIELD must not be empty")
