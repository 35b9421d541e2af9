"""Common backend response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error body returned by the builder backend."""

    status: int
    message: str
    code: str | None = None
    details: dict[str, Any] | None = None


class PaginationMetadata(BaseModel):
    """Pagination metadata of list endpoints."""

    total: int | None = None
    limit: int | None = None
    offset: int = 0


class PaginatedResponse(BaseModel):
    """List response wrapper.

    Format: ``{"items": [...], "metadata": {"total", "limit", "offset"}}``
    """

    items: list[Any]
    metadata: PaginationMetadata | None = None
