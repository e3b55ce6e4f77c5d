"""Tests for OrderProgressService: toggles, gate enforcement, derivation and atomicity."""
import asyncio

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from formation_api.core.exceptions import (
    DocumentRequiredError,
    InvalidEventTypeError,
    NotFoundError,
    PersistenceError,
)
from formation_api.db.base import async_session_factory
from formation_api.domain.enums import SYSTEM_ACTOR, OrderStatus
from formation_api.domain.progress import OrderProgressEvent
from formation_api.domain.status_history import OrderStatusHistory
from formation_api.repositories.progress import ProgressEventRepository
from formation_api.repositories.status_history import StatusHistoryRepository
from formation_api.services.order_progress import OrderProgressService


async def _history(session, order_id):
    result = await session.execute(
        select(OrderStatusHistory)
        .where(OrderStatusHistory.order_id == order_id)
        .order_by(OrderStatusHistory.created_at)
    )
    return list(result.scalars().all())


async def _events(session, order_id):
    result = await session.execute(
        select(OrderProgressEvent).where(OrderProgressEvent.order_id == order_id)
    )
    return {e.event_type: e for e in result.scalars().all()}


@pytest.mark.asyncio
async def test_basic_order_walks_pending_processing_completed(session, make_order, seed_document):
    """LLC_FILED starts processing; the last required step completes the order."""
    order = await make_order()
    service = OrderProgressService(session)

    await service.set_event_completion(order.id, "ORDER_RECEIVED", True)
    await session.refresh(order)
    assert order.status == OrderStatus.PENDING_PROCESSING.value

    decision = await service.set_event_completion(order.id, "LLC_FILED", True)
    assert decision.derived is OrderStatus.PROCESSING
    await session.refresh(order)
    assert order.status == "PROCESSING"
    assert order.completed_at is None

    history = await _history(session, order.id)
    assert len(history) == 1
    assert history[0].previous_status == "PENDING_PROCESSING"
    assert history[0].new_status == "PROCESSING"
    assert history[0].changed_by == SYSTEM_ACTOR
    assert "LLC_FILED completed" in history[0].notes

    await seed_document(order, "ARTICLES_OF_ORGANIZATION")
    await service.set_event_completion(order.id, "LLC_APPROVED", True)
    await session.refresh(order)
    assert order.status == "COMPLETED"
    assert order.completed_at is not None

    history = await _history(session, order.id)
    assert [h.new_status for h in history] == ["PROCESSING", "COMPLETED"]


@pytest.mark.asyncio
async def test_toggle_is_idempotent(session, make_order):
    order = await make_order()
    service = OrderProgressService(session)

    first = await service.set_event_completion(order.id, "LLC_FILED", True)
    second = await service.set_event_completion(order.id, "LLC_FILED", True)

    assert first.changed and not second.changed
    events = await _events(session, order.id)
    assert list(events) == ["LLC_FILED"]
    assert events["LLC_FILED"].completed_at is not None
    assert len(await _history(session, order.id)) == 1


@pytest.mark.asyncio
async def test_uncompleting_clears_timestamp_without_new_row(session, make_order):
    order = await make_order()
    service = OrderProgressService(session)

    await service.set_event_completion(order.id, "ORDER_RECEIVED", True)
    await service.set_event_completion(order.id, "ORDER_RECEIVED", False)

    events = await _events(session, order.id)
    assert len(events) == 1
    await session.refresh(events["ORDER_RECEIVED"])
    assert events["ORDER_RECEIVED"].completed_at is None


@pytest.mark.asyncio
async def test_uncompleting_a_fresh_event_creates_an_open_row(session, make_order):
    order = await make_order()
    await OrderProgressService(session).set_event_completion(order.id, "EIN_FILED", False)

    events = await _events(session, order.id)
    assert events["EIN_FILED"].completed_at is None
    await session.refresh(order)
    assert order.status == "PENDING_PROCESSING"


@pytest.mark.asyncio
async def test_gated_event_rejected_without_document(session, make_order):
    """EIN_OBTAINED without an EIN_CONFIRMATION is refused and nothing is written."""
    order = await make_order(need_ein=True)

    with pytest.raises(DocumentRequiredError) as exc_info:
        await OrderProgressService(session).set_event_completion(order.id, "EIN_OBTAINED", True)

    assert exc_info.value.document_type == "EIN_CONFIRMATION"
    assert await _events(session, order.id) == {}
    await session.refresh(order)
    assert order.status == "PENDING_PROCESSING"


@pytest.mark.asyncio
async def test_gate_accepts_non_latest_document(session, make_order, seed_document):
    order = await make_order()
    await seed_document(order, "ARTICLES_OF_ORGANIZATION", is_latest=False)

    await OrderProgressService(session).set_event_completion(order.id, "LLC_APPROVED", True)
    assert (await _events(session, order.id))["LLC_APPROVED"].completed_at is not None


@pytest.mark.asyncio
async def test_uncompleting_gated_event_skips_gate(session, make_order):
    order = await make_order()
    await OrderProgressService(session).set_event_completion(order.id, "LLC_APPROVED", False)
    assert (await _events(session, order.id))["LLC_APPROVED"].completed_at is None


@pytest.mark.asyncio
async def test_completed_order_stays_completed_when_step_reopened(
    session, make_order, seed_events
):
    order = await make_order()
    await seed_events(order, "ORDER_RECEIVED", "LLC_FILED")
    order.status = OrderStatus.COMPLETED.value
    await session.commit()

    decision = await OrderProgressService(session).set_event_completion(
        order.id, "LLC_FILED", False
    )

    assert not decision.changed
    await session.refresh(order)
    assert order.status == "COMPLETED"
    assert (await _events(session, order.id))["LLC_FILED"].completed_at is None
    assert await _history(session, order.id) == []


@pytest.mark.asyncio
async def test_cancelled_order_is_not_completed(session, make_order, seed_events, seed_document):
    order = await make_order(status=OrderStatus.CANCELLED.value)
    await seed_events(order, "ORDER_RECEIVED", "LLC_FILED")
    await seed_document(order, "ARTICLES_OF_ORGANIZATION")

    await OrderProgressService(session).set_event_completion(order.id, "LLC_APPROVED", True)

    await session.refresh(order)
    assert order.status == "CANCELLED"
    assert await _history(session, order.id) == []


@pytest.mark.asyncio
async def test_single_history_row_for_direct_completion(session, make_order, seed_events):
    """All steps done by the filing toggle: one PENDING -> COMPLETED row."""
    order = await make_order()
    await seed_events(order, "ORDER_RECEIVED", "LLC_APPROVED")

    await OrderProgressService(session).set_event_completion(order.id, "LLC_FILED", True)

    history = await _history(session, order.id)
    assert len(history) == 1
    assert (history[0].previous_status, history[0].new_status) == (
        "PENDING_PROCESSING",
        "COMPLETED",
    )


@pytest.mark.asyncio
async def test_unknown_event_type_rejected_before_lookup(session):
    with pytest.raises(InvalidEventTypeError):
        await OrderProgressService(session).set_event_completion("missing", "NOPE", True)


@pytest.mark.asyncio
async def test_unknown_order(session, db):
    with pytest.raises(NotFoundError):
        await OrderProgressService(session).set_event_completion(
            "00000000-0000-0000-0000-000000000000", "LLC_FILED", True
        )


@pytest.mark.asyncio
async def test_failed_history_write_rolls_back_event(session, make_order, monkeypatch):
    order = await make_order()

    async def broken_append(self, **kwargs):
        raise OperationalError("INSERT INTO order_status_history", {}, Exception("disk I/O error"))

    monkeypatch.setattr(StatusHistoryRepository, "append", broken_append)

    with pytest.raises(PersistenceError):
        await OrderProgressService(session).set_event_completion(order.id, "LLC_FILED", True)

    assert await _events(session, order.id) == {}
    await session.refresh(order)
    assert order.status == "PENDING_PROCESSING"


@pytest.mark.asyncio
async def test_progress_summary(session, make_order, seed_events, seed_document):
    order = await make_order(need_ein=True, need_bank_letter=True)
    await seed_events(order, "ORDER_RECEIVED", "LLC_FILED")
    await seed_document(order, "EIN_CONFIRMATION")

    progress = await OrderProgressService(session).get_progress(order.id)

    assert [s.event_type for s in progress.steps] == [
        "ORDER_RECEIVED",
        "LLC_FILED",
        "LLC_APPROVED",
        "EIN_FILED",
        "EIN_OBTAINED",
        "BANK_RESOLUTION_LETTER_GENERATED",
    ]
    assert progress.completed_count == 2
    assert progress.total_count == 6
    assert progress.percent == 33

    by_type = {s.event_type: s for s in progress.steps}
    assert by_type["LLC_FILED"].label == "LLC Filed with State"
    assert by_type["LLC_APPROVED"].required_document_type == "ARTICLES_OF_ORGANIZATION"
    assert by_type["LLC_APPROVED"].has_required_document is False
    assert by_type["EIN_OBTAINED"].has_required_document is True
    assert by_type["ORDER_RECEIVED"].required_document_type is None
    assert by_type["ORDER_RECEIVED"].has_required_document is True


@pytest.mark.asyncio
async def test_concurrent_toggles_on_one_order_serialize(
    session, make_order, seed_events, seed_document, monkeypatch
):
    """Two sessions toggle at once; the second derives from the first one's commit."""
    order = await make_order()
    await seed_events(order, "ORDER_RECEIVED")
    await seed_document(order, "ARTICLES_OF_ORGANIZATION")

    write_event = ProgressEventRepository.set_completed_at

    async def slow_write_event(self, *args, **kwargs):
        await asyncio.sleep(0.2)
        return await write_event(self, *args, **kwargs)

    monkeypatch.setattr(ProgressEventRepository, "set_completed_at", slow_write_event)

    async def toggle(event_type):
        async with async_session_factory() as s:
            await OrderProgressService(s).set_event_completion(order.id, event_type, True)

    await asyncio.gather(toggle("LLC_FILED"), toggle("LLC_APPROVED"))

    history = await _history(session, order.id)
    transitions = {h.previous_status: h.new_status for h in history}
    assert len(transitions) == len(history)

    status = "PENDING_PROCESSING"
    while status in transitions:
        status = transitions.pop(status)
    assert status == "COMPLETED"
    assert transitions == {}

    await session.refresh(order)
    assert order.status == "COMPLETED"
    assert set(await _events(session, order.id)) == {"ORDER_RECEIVED", "LLC_FILED", "LLC_APPROVED"}
