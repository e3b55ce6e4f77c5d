"""Order progress router — checklist state and completion toggles."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from formation_api.core.response import DataResponse, SuccessResponse
from formation_api.db.base import get_db
from formation_api.schemas.orders import OrderProgressOut, ProgressToggleRequest
from formation_api.services.order_progress import OrderProgressService

router = APIRouter(prefix="/api/orders", tags=["Order Progress"])


@router.get("/{order_id}/progress", response_model=DataResponse[OrderProgressOut])
async def get_order_progress(
    order_id: str,
    session: AsyncSession = Depends(get_db),
):
    """Applicable steps for the order with completion and document state."""
    progress = await OrderProgressService(session).get_progress(order_id)
    return {"data": progress}


@router.post("/{order_id}/progress", response_model=SuccessResponse)
async def set_order_progress(
    order_id: str,
    body: ProgressToggleRequest,
    session: AsyncSession = Depends(get_db),
):
    """Mark one progress event completed (or not) and re-derive the order status."""
    await OrderProgressService(session).set_event_completion(
        order_id, body.event_type, body.completed
    )
    return SuccessResponse()
