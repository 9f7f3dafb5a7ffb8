# This project was developed with assistance from AI tools.
"""Error response schemas.

Framework-level failures (auth, validation, unhandled) use RFC 7807 Problem
Details. The two admin endpoints keep their own ``{error, details}`` body,
which existing portal clients parse.
"""

from typing import Any

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See https://datatracker.ietf.org/doc/html/rfc7807
    """

    type: str = Field(
        default="about:blank",
        description="URI reference identifying the problem type.",
    )
    title: str = Field(description="Short human-readable summary of the problem.")
    status: int = Field(description="HTTP status code.")
    detail: str = Field(
        default="",
        description="Human-readable explanation specific to this occurrence.",
    )
    request_id: str = Field(
        default="",
        description="Correlation ID for tracing this request in logs.",
    )


class ProxyErrorResponse(BaseModel):
    """Failure body of the admin endpoints."""

    error: str = Field(description="Human-readable failure message.")
    details: Any = Field(default=None, description="Provider error payload, when available.")
