"""Pydantic schemas for API requests and responses."""

from messageboard.schemas.error import ErrorResponse
from messageboard.schemas.message import (
    AdminMessageItem,
    AdminMessagePage,
    AuthorCreate,
    MessageCreate,
    MessageCreated,
    MessageItem,
    MessagePage,
    PageNotFound,
)
from messageboard.schemas.moderation import ModerationDelete, ModerationUpdate

__all__ = [
    "ErrorResponse",
    "AuthorCreate",
    "MessageCreate",
    "MessageCreated",
    "MessageItem",
    "MessagePage",
    "AdminMessageItem",
    "AdminMessagePage",
    "PageNotFound",
    "ModerationUpdate",
    "ModerationDelete",
]
