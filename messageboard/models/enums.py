"""Enums for model fields and queries over them."""

from enum import Enum


class VisibilityFilter(str, Enum):
    """Which messages a listing query returns."""

    VISIBLE = "visible"
    PENDING = "pending"
    ALL = "all"

    def visible_value(self) -> bool | None:
        """Value ``Message.visible`` must equal, or None for no filter."""
        if self == VisibilityFilter.VISIBLE:
            return True
        if self == VisibilityFilter.PENDING:
            return False
        return None


class AccessDecision(str, Enum):
    """Outcome of an API key check."""

    AUTHORIZED = "authorized"
    FORBIDDEN = "forbidden"
    INVALID_CREDENTIAL = "invalid_credential"
