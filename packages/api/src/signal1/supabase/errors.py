# This project was developed with assistance from AI tools.
"""Error raised by the Supabase client layer."""

from typing import Any

import httpx


class SupabaseError(Exception):
    """A Supabase API call failed (HTTP error status or network failure).

    ``status`` is 0 for transport errors that never produced a response.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int = 0,
        code: str | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    @classmethod
    def from_response(cls, response: httpx.Response) -> "SupabaseError":
        """Build from an error response, reading GoTrue, PostgREST or Storage bodies."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            return cls(
                response.text or response.reason_phrase or "Request failed",
                status=response.status_code,
            )

        message = (
            body.get("error_description")
            or body.get("msg")
            or body.get("message")
            or body.get("error")
            or "Request failed"
        )
        code = body.get("error_code") or body.get("code") or body.get("error")
        details = body.get("details") or body.get("hint")
        return cls(
            str(message),
            status=response.status_code,
            code=str(code) if code is not None else None,
            details=details,
        )

    def to_dict(self) -> dict:
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
        }
