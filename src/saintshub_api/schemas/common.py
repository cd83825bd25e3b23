"""Common Pydantic v2 schemas shared across the API.

Provides the camelCase base model and the response envelopes.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model whose wire keys are camelCase (``firstName``, ``songUrl``)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorDetail(BaseModel):
    """A single field violation."""

    path: str = Field(description="Dotted path of the offending field")
    message: str = Field(description="Human-readable reason")


class ErrorResponse(BaseModel):
    """Standard error response body."""

    status: Literal["fail", "error"] = Field(description="'fail' for 4xx, 'error' for 5xx")
    message: str = Field(description="Human-readable error message")
    errors: list[ErrorDetail] | None = Field(default=None, description="Detailed validation errors")


class MessageResponse(BaseModel):
    """Success acknowledgement without a payload."""

    status: Literal["success"] = "success"
    message: str
