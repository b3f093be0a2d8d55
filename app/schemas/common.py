"""Shared schema base and the error envelope."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Serializes as camelCase; accepts camelCase or snake_case on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorBody(CamelModel):
    code: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Human-readable message")
    details: Any | None = Field(default=None, description="Optional structured detail")


class ErrorMeta(CamelModel):
    status_code: int
    path: str
    request_id: str
    timestamp: str


class ErrorEnvelope(CamelModel):
    """Body of every non-2xx response."""

    success: bool = False
    error: ErrorBody
    meta: ErrorMeta
