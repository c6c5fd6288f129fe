"""Public message API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status

from messageboard.api.dependencies import (
    get_listing_service,
    get_rate_limiter,
    get_submission_service,
    require_public,
)
from messageboard.models.enums import VisibilityFilter
from messageboard.schemas.error import ErrorResponse
from messageboard.schemas.message import MessageCreate, MessageCreated, MessagePage, PageNotFound
from messageboard.services.errors import RateLimitedError
from messageboard.services.listing_service import ListingService
from messageboard.services.rate_limit import SubmissionRateLimiter
from messageboard.services.submission_service import SubmissionService

router = APIRouter(
    prefix="/api/v1/messages",
    tags=["messages"],
    dependencies=[Depends(require_public)],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=MessagePage,
    responses={status.HTTP_404_NOT_FOUND: {"model": PageNotFound}},
)
def list_messages(
    listing: Annotated[ListingService, Depends(get_listing_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, alias="pageSize")] = 20,
):
    """Get a page of approved messages, oldest first."""
    return listing.list_messages(page, page_size, VisibilityFilter.VISIBLE)


@router.post(
    "",
    response_model=MessageCreated,
    status_code=status.HTTP_201_CREATED,
    responses={
        status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
        status.HTTP_409_CONFLICT: {"model": ErrorResponse},
        status.HTTP_429_TOO_MANY_REQUESTS: {"model": ErrorResponse},
    },
)
async def submit_message(
    message_data: MessageCreate,
    request: Request,
    service: Annotated[SubmissionService, Depends(get_submission_service)],
    limiter: Annotated[SubmissionRateLimiter, Depends(get_rate_limiter)],
):
    """Submit a message. It stays pending until an operator approves it."""
    client = request.client.host if request.client else "unknown"
    if not limiter.reserve(client):
        raise RateLimitedError()

    try:
        return await service.submit(message_data)
    except BaseException:
        limiter.release(client)
        raise
