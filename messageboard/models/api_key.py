"""API key model."""

from sqlalchemy import Boolean, Column, Integer, String

from messageboard.database import Base
from messageboard.models.mixins import CreatedAtMixin


class ApiKey(Base, CreatedAtMixin):
    """API key used by the authorization gate.

    Keys are handed out as ``<prefix>.<secret>``; only the prefix is stored in
    clear, the secret is kept as a one-way hash.
    """

    __tablename__ = "api_keys"

    id = Column(Integer, primary_key=True, index=True)
    prefix = Column(String(16), unique=True, nullable=False, index=True)
    key_hash = Column(String(255), nullable=False)
    scopes = Column(String(255), nullable=False, default="")  # space separated
    description = Column(String(255), nullable=True)
    revoked = Column(Boolean, nullable=False, default=False)

    @property
    def scope_set(self) -> set[str]:
        """Scopes granted to this key."""
        return set(self.scopes.split())
