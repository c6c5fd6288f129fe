"""FastAPI dependencies for authorization, database and services."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from messageboard.config import get_settings
from messageboard.database import get_db
from messageboard.models.enums import AccessDecision
from messageboard.services.auth import ADMIN_SCOPE, PUBLIC_SCOPE, check_access
from messageboard.services.avatar_service import AvatarIngestor
from messageboard.services.errors import AuthorizationError
from messageboard.services.listing_service import ListingService
from messageboard.services.moderation_service import ModerationService
from messageboard.services.rate_limit import SubmissionRateLimiter
from messageboard.services.submission_service import SubmissionService

settings = get_settings()

api_key_header = APIKeyHeader(name=settings.api_key_header, auto_error=False)

_rate_limiter = SubmissionRateLimiter(
    0 if settings.is_development else settings.submission_rate_limit_seconds
)


def require_scopes(*scopes: str, always: bool = True) -> Callable[..., None]:
    """Build a dependency that checks the request's API key for ``scopes``.

    With ``always=False`` the check only runs when ``api_key_required`` is set.
    Fails with 401 for a missing or unknown key and 403 for a key lacking scopes,
    before the route touches any other storage.
    """

    def dependency(
        credential: Annotated[str | None, Security(api_key_header)],
        db: Annotated[Session, Depends(get_db)],
    ) -> None:
        current = get_settings()
        if not always and not current.api_key_required:
            return

        decision = check_access(db, credential, scopes)
        if decision == AccessDecision.INVALID_CREDENTIAL:
            raise AuthorizationError.invalid_credential(current.api_key_header)
        if decision == AccessDecision.FORBIDDEN:
            raise AuthorizationError()

    return dependency


require_admin = require_scopes(ADMIN_SCOPE)
require_public = require_scopes(PUBLIC_SCOPE, always=False)


def get_avatar_ingestor() -> AvatarIngestor:
    """Get avatar ingestor configured from settings."""
    return AvatarIngestor.from_settings(get_settings())


def get_rate_limiter() -> SubmissionRateLimiter:
    """Get the process-wide submission rate limiter."""
    return _rate_limiter


def get_listing_service(
    db: Annotated[Session, Depends(get_db)],
) -> ListingService:
    """Get listing service with dependencies."""
    return ListingService(db)


def get_submission_service(
    db: Annotated[Session, Depends(get_db)],
    ingestor: Annotated[AvatarIngestor, Depends(get_avatar_ingestor)],
) -> SubmissionService:
    """Get submission service with dependencies."""
    return SubmissionService(db, ingestor)


def get_moderation_service(
    db: Annotated[Session, Depends(get_db)],
    ingestor: Annotated[AvatarIngestor, Depends(get_avatar_ingestor)],
) -> ModerationService:
    """Get moderation service with dependencies."""
    return ModerationService(db, ingestor)
