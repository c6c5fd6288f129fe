"""Message submission pipeline."""

import asyncio
import hashlib
import hmac
import logging

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import insert
from sqlalchemy.orm import Session

from messageboard.config import Settings, get_settings
from messageboard.models.avatar import Avatar
from messageboard.models.message import Message
from messageboard.models.user import User
from messageboard.schemas.message import MessageCreate, MessageCreated
from messageboard.services.avatar_service import AvatarIngestor
from messageboard.services.errors import ConflictError, ValidationError
from messageboard.services.storage import insert_if_absent, rollback_quietly

logger = logging.getLogger(__name__)


def hash_email(email: str, secret: str) -> str:
    """One-way, deterministic hash of a normalized email address."""
    return hmac.new(
        secret.encode("utf-8"), email.strip().lower().encode("utf-8"), hashlib.sha256
    ).hexdigest()


class SubmissionService:
    """Turns a submission into a stored user, avatar and message.

    The user, avatar and message rows are written in one transaction. Avatar
    frames are written to disk before that transaction commits, so whenever the
    commit is not reached the user's asset directory is removed again.
    """

    def __init__(self, db: Session, ingestor: AvatarIngestor, settings: Settings | None = None):
        self.db = db
        self.ingestor = ingestor
        self.settings = settings or get_settings()

    async def submit(self, data: MessageCreate) -> MessageCreated:
        email = self.check_email(data.author.email)
        self.ingestor.validate_urls(data.author.avatar)

        email_hash = hash_email(email, self.settings.email_hash_secret)

        # Session calls block, so they run in worker threads; a transaction
        # waiting on a concurrent one must never stall the event loop.
        user_id: int | None = None
        assets_created = False
        committed = False
        try:
            user_id = await asyncio.to_thread(self._insert_user, data.author.name, email_hash)
            if user_id is None:
                raise ConflictError()

            assets_created = True
            self.ingestor.create_user_dir(user_id)
            frames = await self.ingestor.ingest(user_id, data.author.avatar)

            row = await asyncio.to_thread(self._store_and_commit, user_id, frames, data.content)
            committed = True
        finally:
            if not committed:
                await asyncio.to_thread(rollback_quietly, self.db)
                if assets_created:
                    await asyncio.to_thread(self._remove_assets, user_id)

        logger.info(f"Accepted message {row.id} from user {user_id}")
        return MessageCreated(id=row.id, timestamp=row.posted_at)

    def check_email(self, email: str | None) -> str:
        """Require an email, and unless running permissively, a well-formed one."""
        if email is None or not email.strip():
            raise ValidationError("Invalid email: an email address is required")
        if self.settings.allow_invalid_emails:
            return email.strip()
        try:
            return validate_email(email, check_deliverability=False).normalized
        except EmailNotValidError as e:
            raise ValidationError(f"Invalid email: {e}") from None

    def _insert_user(self, name: str, email_hash: str) -> int | None:
        row = insert_if_absent(
            self.db,
            User.__table__,
            {"name": name, "email_hash": email_hash},
            User.__table__.c.id,
        )
        return row.id if row else None

    def _insert_message(self, user_id: int, content: str):
        # author_id is unique, so a concurrent submission for the same user
        # that got here first leaves nothing to insert
        return insert_if_absent(
            self.db,
            Message.__table__,
            {"author_id": user_id, "content": content},
            Message.__table__.c.id,
            Message.__table__.c.posted_at,
        )

    def _store_and_commit(self, user_id: int, frames: list[str], content: str):
        self.db.execute(insert(Avatar.__table__).values(user_id=user_id, frames=frames))
        row = self._insert_message(user_id, content)
        if row is None:
            raise ConflictError()
        self.db.commit()
        return row

    def _remove_assets(self, user_id: int) -> None:
        try:
            self.ingestor.remove_user_dir(user_id)
        except OSError as e:
            logger.error(f"Failed to remove asset directory for user {user_id}: {e}")
