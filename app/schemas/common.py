"""Common schema utilities."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class RequestEnvelope(BaseModel):
    """Request body wrapper. Field checks run on ``data`` by hand."""

    data: dict[str, Any] = Field(default_factory=dict)


class DataResponse(BaseModel, Generic[T]):
    """Success response wrapper."""

    data: T


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str
    detail: str | None = None
