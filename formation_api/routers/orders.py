"""Order administration router — detail view and manual status override."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formation_api.core.response import DataResponse
from formation_api.db.base import get_db
from formation_api.schemas.orders import OrderDetailOut, OrderOut, OrderStatusUpdate
from formation_api.services.orders import OrderService

router = APIRouter(prefix="/api/orders", tags=["Orders"])


@router.get("/{order_id}", response_model=DataResponse[OrderDetailOut])
async def get_order(
    order_id: str,
    session: AsyncSession = Depends(get_db),
):
    order = await OrderService(session).get_order(order_id)
    return {"data": OrderDetailOut.model_validate(order)}


@router.patch("/{order_id}/status", response_model=DataResponse[OrderOut])
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    session: AsyncSession = Depends(get_db),
):
    """Manual admin override of status and/or priority."""
    order = await OrderService(session).update_status(order_id, body)
    return {"data": OrderOut.model_validate(order)}
