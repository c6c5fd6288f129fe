"""Error response schema."""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response."""

    status: int
    message: str
