"""Moderation schemas."""

from pydantic import BaseModel


class ModerationUpdate(BaseModel):
    """Approve or hide a message."""

    id: int
    approve: bool


class ModerationDelete(BaseModel):
    """Delete a message, optionally banning its author."""

    id: int
    ban: bool = False
