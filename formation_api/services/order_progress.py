"""Order progress service — checklist toggles and status derivation.

Every mutation runs as one transaction that first locks the order row, so
two admins toggling steps on the same order serialize and the second one
derives status from the first one's committed events.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from formation_api.core import clock
from formation_api.core.exceptions import DocumentRequiredError, NotFoundError
from formation_api.db.base import transaction
from formation_api.domain.enums import SYSTEM_ACTOR, OrderStatus
from formation_api.domain.order import Order
from formation_api.repositories.document import DocumentRepository
from formation_api.repositories.order import OrderRepository
from formation_api.repositories.progress import ProgressEventRepository
from formation_api.repositories.status_history import StatusHistoryRepository
from formation_api.schemas.orders import OrderProgressOut, ProgressStepOut
from formation_api.services import progress_rules
from formation_api.services.progress_rules import StatusDecision

logger = logging.getLogger(__name__)


class OrderProgressService:
    def __init__(self, session: AsyncSession):
        self._session = session
        self._orders = OrderRepository(session)
        self._events = ProgressEventRepository(session)
        self._documents = DocumentRepository(session)
        self._history = StatusHistoryRepository(session)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def get_progress(self, order_id: str) -> OrderProgressOut:
        order = await self._orders.get_by_id(order_id)
        if not order:
            raise NotFoundError("Order", order_id)

        events = {e.event_type: e for e in await self._events.list_for_order(order_id)}
        document_types = await self._documents.document_types_for_order(order_id)

        steps = []
        for step in progress_rules.required_steps_for(order):
            event = events.get(step.value)
            needed = progress_rules.required_document(step)
            steps.append(
                ProgressStepOut(
                    event_type=step.value,
                    label=progress_rules.EVENT_LABELS[step],
                    completed=event is not None and event.is_completed,
                    completed_at=event.completed_at if event else None,
                    required_document_type=needed.value if needed else None,
                    has_required_document=progress_rules.can_complete(step, document_types),
                )
            )

        done = sum(1 for s in steps if s.completed)
        return OrderProgressOut(
            order_id=order.id,
            status=order.status,
            steps=steps,
            completed_count=done,
            total_count=len(steps),
            percent=round(done / len(steps) * 100),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def set_event_completion(
        self, order_id: str, event_type: str, completed: bool
    ) -> StatusDecision:
        """Mark one progress event completed or not, then re-derive order status."""
        event = progress_rules.parse_event_type(event_type)

        async with transaction(self._session):
            order = await self._orders.get_for_update(order_id)
            if not order:
                raise NotFoundError("Order", order_id)

            if completed:
                document_types = await self._documents.document_types_for_order(order_id)
                if not progress_rules.can_complete(event, document_types):
                    needed = progress_rules.required_document(event)
                    logger.info(
                        "Order %s: refusing to complete %s without %s",
                        order_id, event.value, needed.value,
                    )
                    raise DocumentRequiredError(event.value, needed.value)

            await self._events.set_completed_at(
                order_id, event.value, clock.utcnow() if completed else None
            )
            decision = await self.apply_derived_status(
                order,
                notes=(
                    f"Status updated based on progress: {event.value} "
                    f"{'completed' if completed else 'uncompleted'}"
                ),
            )

        return decision

    async def apply_derived_status(self, order: Order, notes: str) -> StatusDecision:
        """Derive status from the order's current events and persist a change.

        Must run inside the caller's transaction, after the event writes
        have been flushed. Writes nothing when the status is unchanged.
        """
        completed = await self._events.completed_event_types(order.id)
        decision = progress_rules.derive_status(
            OrderStatus(order.status),
            completed,
            progress_rules.required_steps_for(order),
        )
        if not decision.changed:
            return decision

        await self._history.append(
            order_id=order.id,
            previous_status=decision.previous.value,
            new_status=decision.derived.value,
            changed_by=SYSTEM_ACTOR,
            notes=notes,
        )
        values = {"status": decision.derived.value}
        if decision.derived == OrderStatus.COMPLETED:
            values["completed_at"] = clock.utcnow()
        await self._orders.update(order.id, **values)

        logger.info(
            "Order %s status %s -> %s (%s)",
            order.id, decision.previous.value, decision.derived.value, notes,
        )
        return decision
