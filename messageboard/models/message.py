"""Message model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Text, false, func
from sqlalchemy.orm import relationship

from messageboard.database import Base


class Message(Base):
    """A board message.

    ``posted_at`` and ``id`` are both assigned by the database so listing order
    never depends on client clocks. ``author_id`` is unique: one message per user.
    """

    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    author_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    content = Column(Text, nullable=False)
    visible = Column(Boolean, nullable=False, default=False, server_default=false())
    posted_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Relationships
    author = relationship("User", back_populates="message")

    __table_args__ = (Index("ix_messages_visible_posted_at", "visible", "posted_at", "id"),)
