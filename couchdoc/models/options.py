"""Service construction options."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from couchdoc.config import settings


class PaginationConfig(BaseModel):
    """Per-collection page size policy. No default means no pagination."""

    model_config = {"extra": "forbid"}

    default: int | None = Field(default=None, ge=0)
    max: int | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _default_within_max(self) -> PaginationConfig:
        if self.default is not None and self.max is not None and self.default > self.max:
            raise ValueError("paginate.default must not exceed paginate.max")
        return self

    @property
    def enabled(self) -> bool:
        return self.default is not None


class ServiceOptions(BaseModel):
    """Everything DocumentService needs besides the store connection."""

    model_config = {"extra": "forbid", "frozen": True}

    bucket: str = Field(min_length=1)
    name: str = Field(min_length=1)
    separator: str = Field(default_factory=lambda: settings.KEY_SEPARATOR, min_length=1)
    id: str = Field(default_factory=lambda: settings.ID_FIELD, min_length=1)
    paginate: PaginationConfig = Field(default_factory=lambda: PaginationConfig(**settings.PAGINATE))
