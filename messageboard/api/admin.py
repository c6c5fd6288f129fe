"""Moderation API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status

from messageboard.api.dependencies import get_listing_service, get_moderation_service, require_admin
from messageboard.models.enums import VisibilityFilter
from messageboard.schemas.error import ErrorResponse
from messageboard.schemas.message import AdminMessagePage, PageNotFound
from messageboard.schemas.moderation import ModerationDelete, ModerationUpdate
from messageboard.services.listing_service import ListingService
from messageboard.services.moderation_service import ModerationService

router = APIRouter(
    prefix="/api/v1/admin/messages",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={
        status.HTTP_401_UNAUTHORIZED: {"model": ErrorResponse},
        status.HTTP_403_FORBIDDEN: {"model": ErrorResponse},
    },
)


@router.get(
    "",
    response_model=AdminMessagePage,
    responses={status.HTTP_404_NOT_FOUND: {"model": PageNotFound}},
)
def list_messages(
    listing: Annotated[ListingService, Depends(get_listing_service)],
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(ge=1, le=100, alias="pageSize")] = 20,
    pending: bool = False,
):
    """Get a page of all messages, or only those awaiting review."""
    visibility = VisibilityFilter.PENDING if pending else VisibilityFilter.ALL
    return listing.list_messages(page, page_size, visibility)


@router.put(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
def update_visibility(
    update_data: ModerationUpdate,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
):
    """Approve a message for public display, or hide it."""
    service.set_visibility(update_data.id, update_data.approve)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
)
def delete_message(
    delete_data: ModerationDelete,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
):
    """Delete a message; with ``ban`` also delete its author and avatar."""
    service.remove(delete_data.id, delete_data.ban)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
