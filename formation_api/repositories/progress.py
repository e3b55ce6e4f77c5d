"""Progress event repository — keyed by (order_id, event_type)."""

from datetime import datetime

from sqlalchemy import select

from formation_api.domain.progress import OrderProgressEvent
from formation_api.repositories.base import BaseRepository


class ProgressEventRepository(BaseRepository[OrderProgressEvent]):
    model = OrderProgressEvent

    async def list_for_order(self, order_id: str) -> list[OrderProgressEvent]:
        result = await self._session.execute(
            select(OrderProgressEvent).where(OrderProgressEvent.order_id == order_id)
        )
        return list(result.scalars().all())

    async def get_for_order(self, order_id: str, event_type: str) -> OrderProgressEvent | None:
        result = await self._session.execute(
            select(OrderProgressEvent)
            .where(OrderProgressEvent.order_id == order_id)
            .where(OrderProgressEvent.event_type == event_type)
        )
        return result.scalars().first()

    async def set_completed_at(
        self, order_id: str, event_type: str, completed_at: datetime | None
    ) -> OrderProgressEvent:
        """Create or update the (order, event type) row with the given completion time."""
        event = await self.get_for_order(order_id, event_type)
        if event is None:
            return await self.create(
                order_id=order_id, event_type=event_type, completed_at=completed_at
            )
        event.completed_at = completed_at
        await self._session.flush()
        return event

    async def completed_event_types(self, order_id: str) -> set[str]:
        result = await self._session.execute(
            select(OrderProgressEvent.event_type)
            .where(OrderProgressEvent.order_id == order_id)
            .where(OrderProgressEvent.completed_at.is_not(None))
        )
        return set(result.scalars().all())
