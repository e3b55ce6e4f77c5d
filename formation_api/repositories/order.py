"""Order repository."""

from sqlalchemy.orm import selectinload

from formation_api.domain.order import Order
from formation_api.repositories.base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    model = Order

    async def get_for_update(self, order_id: str) -> Order | None:
        """Load an order and take its row lock for the rest of the transaction.

        Serializes concurrent progress mutations on the same order. SQLite
        ignores FOR UPDATE; there the lock is the one ``transaction()`` takes
        at BEGIN. Attributes of an already-loaded instance are overwritten
        with the locked row.
        """
        result = await self._session.execute(
            self._base_query()
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalars().first()

    async def get_with_details(self, order_id: str) -> Order | None:
        result = await self._session.execute(
            self._base_query()
            .where(Order.id == order_id)
            .options(
                selectinload(Order.documents),
                selectinload(Order.status_history),
            )
        )
        return result.scalars().first()
