"""Typed errors raised by the message board services.

Each error carries the HTTP status and client-facing message it maps to; the
exception handlers in ``messageboard.main`` turn them into ``{status, message}``
responses.
"""

from collections.abc import Iterable

from fastapi import status

ALREADY_SUBMITTED = "Message already submitted"


class BoardError(Exception):
    """Base class for errors with a client-facing status and message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, headers: dict[str, str] | None = None):
        self.message = message or self.default_message
        self.headers = headers or {}
        super().__init__(self.message)

    def to_body(self) -> dict:
        """Response body for this error."""
        return {"status": self.status_code, "message": self.message}


class ValidationError(BoardError):
    """Business-rule validation failed; nothing was written."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class IngestionError(ValidationError):
    """One or more avatar frames could not be fetched or decoded."""

    def __init__(self, urls: Iterable[str]):
        self.urls = list(urls)
        super().__init__(f"Could not load avatar image(s): {', '.join(self.urls)}")


class AuthorizationError(BoardError):
    """Caller is not allowed to perform the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"

    @classmethod
    def invalid_credential(cls, header_name: str) -> "AuthorizationError":
        """401 with a challenge naming the expected API key header."""
        error = cls("Unauthorized", headers={"WWW-Authenticate": header_name})
        error.status_code = status.HTTP_401_UNAUTHORIZED
        return error


class NotFoundError(BoardError):
    """Target of the operation does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Message not found"


class PageNotFoundError(NotFoundError):
    """Requested page is past the end; the real page count is still reported."""

    default_message = "Page does not exist"

    def __init__(self, page_count: int):
        self.page_count = page_count
        super().__init__()

    def to_body(self) -> dict:
        return {**super().to_body(), "pageCount": self.page_count}


class ConflictError(BoardError):
    """The visitor has already submitted a message."""

    status_code = status.HTTP_409_CONFLICT
    default_message = ALREADY_SUBMITTED


class RateLimitedError(BoardError):
    """Too many submissions from one client address."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many submissions, try again later"


class InternalError(BoardError):
    """Unexpected storage or filesystem fault."""
