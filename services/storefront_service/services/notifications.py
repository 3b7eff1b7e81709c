"""Customer notification feed."""

import uuid
from typing import Optional

from fastapi import HTTPException, status
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.storefront_service.models import Notification
from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

logger = get_logger(__name__)


def create_notification(
    db: AsyncSession,
    *,
    client_id: uuid.UUID,
    order_id: Optional[uuid.UUID],
    title: str,
    message: str,
) -> Notification:
    """Stage a notification in the caller's transaction (no commit)."""
    notification = Notification(
        client_id=client_id,
        order_id=order_id,
        title=title,
        message=message,
        is_read=False,
    )
    db.add(notification)
    return notification


async def fetch_notifications(
    db: AsyncSession, client_id: uuid.UUID, *, limit: Optional[int] = None
) -> list[Notification]:
    """Latest notifications for a client, newest first, with their order loaded."""
    limit = limit or get_settings().NOTIFICATION_FEED_LIMIT
    query = (
        select(Notification)
        .where(Notification.client_id == client_id)
        .options(selectinload(Notification.order))
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    result = await db.execute(query)
    return list(result.scalars().all())


async def unread_count(db: AsyncSession, client_id: uuid.UUID) -> int:
    """Count every unread notification, not just the visible page."""
    result = await db.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.client_id == client_id, Notification.is_read.is_(False))
    )
    return result.scalar_one()


async def mark_read(
    db: AsyncSession, client_id: uuid.UUID, notification_id: uuid.UUID
) -> Notification:
    query = (
        select(Notification)
        .where(Notification.id == notification_id, Notification.client_id == client_id)
        .options(selectinload(Notification.order))
    )
    result = await db.execute(query)
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )

    if not notification.is_read:
        notification.is_read = True
        try:
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.exception("Failed to mark notification %s as read", notification_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Erreur lors de la mise à jour",
            )
    return notification


async def mark_all_read(db: AsyncSession, client_id: uuid.UUID) -> int:
    """Flip every unread notification of a client in one update."""
    stmt = (
        update(Notification)
        .where(Notification.client_id == client_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    try:
        result = await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("Failed to mark notifications read for client %s", client_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Erreur lors de la mise à jour",
        )
    return result.rowcount
