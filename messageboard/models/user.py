"""User model."""

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from messageboard.database import Base
from messageboard.models.mixins import CreatedAtMixin


class User(Base, CreatedAtMixin):
    """A message author.

    Rows are created once during submission and never updated. Both the display
    name and the email hash are unique, so either one colliding means the visitor
    has already used their single submission.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(64), unique=True, nullable=False)
    email_hash = Column(String(64), unique=True, nullable=False)

    # Relationships
    avatar = relationship(
        "Avatar",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )
    message = relationship(
        "Message",
        back_populates="author",
        uselist=False,
        cascade="all, delete-orphan",
    )
