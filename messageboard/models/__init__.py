"""SQLAlchemy models."""

from messageboard.models.api_key import ApiKey
from messageboard.models.avatar import Avatar
from messageboard.models.message import Message
from messageboard.models.user import User

__all__ = [
    "User",
    "Avatar",
    "Message",
    "ApiKey",
]
