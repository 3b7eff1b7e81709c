"""Admin orders router: order board and status transitions."""

import uuid

from fastapi import APIRouter, Depends
from libs.auth.dependencies import require_admin
from libs.auth.models import AdminIdentity
from libs.db.session import get_async_db
from services.storefront_service.schemas import (
    OrderBoardColumn,
    OrderBoardResponse,
    OrderDetailResponse,
    OrderResponse,
    OrderStatusUpdate,
)
from services.storefront_service.services.order_lifecycle import (
    advance_order,
    advance_to_next,
    get_order_detail,
    group_by_status,
    list_all,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["admin-orders"])


@router.get("/orders", response_model=list[OrderResponse])
async def list_orders(
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return [OrderResponse.model_validate(o) for o in await list_all(db)]


@router.get("/orders/board", response_model=OrderBoardResponse)
async def order_board(
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """All orders bucketed into one column per status, in lifecycle order."""
    board = group_by_status(await list_all(db))
    return OrderBoardResponse(
        columns=[
            OrderBoardColumn(
                status=order_status,
                label=order_status.label,
                orders=[OrderResponse.model_validate(o) for o in orders],
            )
            for order_status, orders in board.items()
        ]
    )


@router.get("/orders/{order_id}", response_model=OrderDetailResponse)
async def get_order(
    order_id: uuid.UUID,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    return OrderDetailResponse.model_validate(await get_order_detail(db, order_id))


@router.patch("/orders/{order_id}/status", response_model=OrderDetailResponse)
async def update_order_status(
    order_id: uuid.UUID,
    data: OrderStatusUpdate,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    """Move an order to the given status; only the next lifecycle step is accepted."""
    order = await advance_order(db, order_id, data.status)
    return OrderDetailResponse.model_validate(order)


@router.post("/orders/{order_id}/advance", response_model=OrderDetailResponse)
async def advance(
    order_id: uuid.UUID,
    admin: AdminIdentity = Depends(require_admin),
    db: AsyncSession = Depends(get_async_db),
):
    order = await advance_to_next(db, order_id)
    return OrderDetailResponse.model_validate(order)
