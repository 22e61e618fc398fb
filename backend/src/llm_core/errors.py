"""Errors raised by chat-completion clients."""

from __future__ import annotations

from typing import Any


class ApiError(Exception):
    """A failed chat-completions call (HTTP status, transport or empty body)."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        *,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.retryable = retryable


class EmptyResponseError(ApiError):
    """The remote model answered without any choices."""


def error_message_from_body(body: Any, status_code: int | None) -> str:
    """
    Extract the human-readable message from an error body.

    Accepts the full `{"error": {"message": ...}}` envelope or the inner
    `{"message": ...}` object. Falls back to a generic status string.
    """
    if isinstance(body, dict):
        inner = body.get("error", body)
        if isinstance(inner, dict):
            message = inner.get("message")
            if isinstance(message, str) and message.strip():
                return message
        elif isinstance(inner, str) and inner.strip():
            return inner
    return f"API error: status {status_code}"


__all__ = ["ApiError", "EmptyResponseError", "error_message_from_body"]
