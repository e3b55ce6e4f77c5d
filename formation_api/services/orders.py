"""Order administration service — detail view and manual status override.

The manual override is the only way into CANCELLED / REFUNDED and the only
way to move an order backwards; derived transitions live in
:mod:`formation_api.services.order_progress`.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from formation_api.core import clock
from formation_api.core.exceptions import BadRequestError, NotFoundError
from formation_api.db.base import transaction
from formation_api.domain.enums import SYSTEM_ACTOR, OrderStatus
from formation_api.domain.order import Order
from formation_api.repositories.order import OrderRepository
from formation_api.repositories.status_history import StatusHistoryRepository
from formation_api.schemas.orders import OrderStatusUpdate

logger = logging.getLogger(__name__)

class OrderService:
    def __init__(self, session: AsyncSession):
        self._orders = OrderRepository(session)
        self._history = StatusHistoryRepository(session)
        self._session = session

    async def get_order(self, order_id: str) -> Order:
        order = await self._orders.get_with_details(order_id)
        if not order:
            raise NotFoundError("Order", order_id)
        order.documents.sort(key=lambda d: d.generated_at, reverse=True)
        order.status_history.sort(key=lambda h: h.created_at, reverse=True)
        return order

    async def update_status(self, order_id: str, data: OrderStatusUpdate) -> Order:
        if data.changed_by == SYSTEM_ACTOR:
            raise BadRequestError(f"'{SYSTEM_ACTOR}' is reserved for automatic status changes")

        async with transaction(self._session):
            order = await self._orders.get_for_update(order_id)
            if not order:
                raise NotFoundError("Order", order_id)

            values: dict = {}
            if data.priority is not None and data.priority.value != order.priority:
                values["priority"] = data.priority.value

            if data.status is not None and data.status.value != order.status:
                await self._history.append(
                    order_id=order.id,
                    previous_status=order.status,
                    new_status=data.status.value,
                    changed_by=data.changed_by,
                    notes=data.notes,
                )
                values["status"] = data.status.value
                if data.status == OrderStatus.COMPLETED:
                    values["completed_at"] = clock.utcnow()
                logger.info(
                    "Order %s status %s -> %s by %s",
                    order.id, order.status, data.status.value, data.changed_by,
                )

            if values:
                order = await self._orders.update(order.id, **values)

        return order
