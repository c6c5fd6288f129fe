"""Operator moderation of messages and authors."""

import logging

from sqlalchemy import delete, update
from sqlalchemy.orm import Session

from messageboard.models.message import Message
from messageboard.services.avatar_service import AvatarIngestor
from messageboard.services.errors import NotFoundError
from messageboard.services.storage import rollback_quietly

logger = logging.getLogger(__name__)


class ModerationService:
    """Service for approving, hiding, deleting and banning."""

    def __init__(self, db: Session, ingestor: AvatarIngestor):
        self.db = db
        self.ingestor = ingestor

    def set_visibility(self, message_id: int, approve: bool) -> None:
        """Make a message publicly visible, or hide it again."""
        result = self.db.execute(
            update(Message)
            .where(Message.id == message_id)
            .values(visible=approve)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            rollback_quietly(self.db)
            raise NotFoundError()
        self.db.commit()
        logger.info(f"Message {message_id} {'approved' if approve else 'hidden'}")

    def remove(self, message_id: int, ban: bool) -> None:
        """Delete a message, or with ``ban`` delete its author and everything they own.

        Without a ban the author row stays, so they cannot submit again.
        """
        if not ban:
            result = self.db.execute(
                delete(Message)
                .where(Message.id == message_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                rollback_quietly(self.db)
                raise NotFoundError()
            self.db.commit()
            logger.info(f"Message {message_id} deleted")
            return

        message = self.db.get(Message, message_id)
        if message is None:
            rollback_quietly(self.db)
            raise NotFoundError()

        user = message.author
        user_id = user.id
        try:
            self.db.delete(user)
            self.db.commit()
        except Exception:
            rollback_quietly(self.db)
            raise

        logger.info(f"User {user_id} banned, message {message_id} deleted")
        try:
            self.ingestor.remove_user_dir(user_id)
        except OSError as e:
            logger.error(f"Failed to remove asset directory for banned user {user_id}: {e}")
