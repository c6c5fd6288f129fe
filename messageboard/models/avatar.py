"""Avatar model."""

from sqlalchemy import JSON, Column, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from messageboard.database import Base


class Avatar(Base):
    """Ordered frame URIs of a user's animated avatar (1:1 with User)."""

    __tablename__ = "avatars"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    frames = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)

    # Relationships
    user = relationship("User", back_populates="avatar")
