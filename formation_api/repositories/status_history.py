"""Order status history repository (append-only)."""

from formation_api.domain.status_history import OrderStatusHistory
from formation_api.repositories.base import BaseRepository


class StatusHistoryRepository(BaseRepository[OrderStatusHistory]):
    model = OrderStatusHistory

    async def append(
        self,
        order_id: str,
        previous_status: str | None,
        new_status: str,
        changed_by: str,
        notes: str | None = None,
    ) -> OrderStatusHistory:
        return await self.create(
            order_id=order_id,
            previous_status=previous_status,
            new_status=new_status,
            changed_by=changed_by,
            notes=notes,
        )

