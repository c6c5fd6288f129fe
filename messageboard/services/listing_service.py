"""Paginated message listings."""

import math
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from messageboard.models.avatar import Avatar
from messageboard.models.enums import VisibilityFilter
from messageboard.models.message import Message
from messageboard.models.user import User
from messageboard.services.errors import PageNotFoundError
from messageboard.services.storage import read_only_snapshot


class ListingService:
    """Read path over stored messages."""

    def __init__(self, db: Session):
        self.db = db

    def list_messages(
        self, page: int, page_size: int, visibility: VisibilityFilter
    ) -> dict[str, Any]:
        """Get one page of messages, oldest first.

        Raises PageNotFoundError (carrying the real page count) when the page
        holds no messages.
        """
        visible = visibility.visible_value()

        with read_only_snapshot(self.db):
            count_query = self.db.query(func.count(Message.id))
            rows_query = (
                self.db.query(
                    Message.id,
                    Message.posted_at,
                    Message.content,
                    Message.visible,
                    User.name,
                    Avatar.frames,
                )
                .join(User, Message.author_id == User.id)
                .join(Avatar, Avatar.user_id == User.id)
            )
            if visible is not None:
                count_query = count_query.filter(Message.visible == visible)
                rows_query = rows_query.filter(Message.visible == visible)

            total = count_query.scalar() or 0
            rows = (
                rows_query.order_by(Message.posted_at.asc(), Message.id.asc())
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )

        page_count = math.ceil(total / page_size)
        if not rows:
            raise PageNotFoundError(page_count)

        return {
            "page": page,
            "page_size": page_size,
            "page_count": page_count,
            "page_data": [
                {
                    "id": row.id,
                    "timestamp": row.posted_at,
                    "author": row.name,
                    "avatar": row.frames,
                    "content": row.content,
                    "visible": row.visible,
                }
                for row in rows
            ],
        }
