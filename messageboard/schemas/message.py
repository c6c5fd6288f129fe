"""Message schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthorCreate(BaseModel):
    """Author block of a submission."""

    name: str = Field(..., min_length=1, max_length=64)
    avatar: list[str] = Field(..., min_length=1)
    email: str = Field(..., max_length=255)


class MessageCreate(BaseModel):
    """Submit a new message."""

    author: AuthorCreate
    content: str = Field(..., min_length=1, max_length=2000)


class MessageCreated(BaseModel):
    """Response to an accepted submission."""

    id: int
    timestamp: datetime


class MessageItem(BaseModel):
    """A single message as shown in listings. Never carries the email hash."""

    id: int
    timestamp: datetime
    author: str
    avatar: list[str]
    content: str


class AdminMessageItem(MessageItem):
    """Listing item for operators, including the moderation state."""

    visible: bool


class MessagePage(BaseModel):
    """One page of messages."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    page_size: int
    page_count: int
    page_data: list[MessageItem]


class AdminMessagePage(MessagePage):
    """One page of messages for operators."""

    page_data: list[AdminMessageItem]


class PageNotFound(BaseModel):
    """Out-of-range page, still reporting the real page count."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: int = 404
    message: str = "Page does not exist"
    page_count: int
