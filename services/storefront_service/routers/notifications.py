"""Customer notification feed router."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_current_client
from libs.auth.models import ClientIdentity
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    MarkAllReadResponse,
    NotificationFeedResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from services.storefront_service.services.notifications import (
    fetch_notifications,
    mark_all_read,
    mark_read,
    unread_count,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["storefront-notifications"])


@router.get("/notifications", response_model=NotificationFeedResponse)
async def get_feed(
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    """Latest notifications plus the count of every unread one."""
    notifications = await fetch_notifications(db, client.id)
    return NotificationFeedResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=await unread_count(db, client.id),
    )


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    return UnreadCountResponse(unread_count=await unread_count(db, client.id))


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
async def read_all(
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    updated = await mark_all_read(db, client.id)
    return MarkAllReadResponse(
        updated=updated, unread_count=await unread_count(db, client.id)
    )


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
async def read_one(
    notification_id: uuid.UUID,
    client: ClientIdentity = Depends(get_current_client),
    db: AsyncSession = Depends(get_async_db),
):
    notification = await mark_read(db, client.id, notification_id)
    return NotificationResponse.model_validate(notification)
