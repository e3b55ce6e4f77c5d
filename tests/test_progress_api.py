"""Endpoint tests for /api/orders/{id}/progress."""
import pytest


@pytest.mark.asyncio
async def test_toggle_returns_success_and_moves_status(client, make_order):
    order = await make_order()

    resp = await client.post(
        f"/api/orders/{order.id}/progress",
        json={"eventType": "LLC_FILED", "completed": True},
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    detail = (await client.get(f"/api/orders/{order.id}")).json()["data"]
    assert detail["status"] == "PROCESSING"
    assert detail["statusHistory"][0]["changedBy"] == "system"


@pytest.mark.asyncio
async def test_invalid_event_type_is_400(client, make_order):
    order = await make_order()

    resp = await client.post(
        f"/api/orders/{order.id}/progress",
        json={"eventType": "COFFEE_ORDERED", "completed": True},
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_EVENT_TYPE"


@pytest.mark.asyncio
async def test_invalid_event_type_wins_over_missing_order(client, db):
    resp = await client.post(
        "/api/orders/does-not-exist/progress",
        json={"eventType": "COFFEE_ORDERED", "completed": True},
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_unknown_order_is_404(client, db):
    resp = await client.post(
        "/api/orders/does-not-exist/progress",
        json={"eventType": "LLC_FILED", "completed": True},
    )

    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_missing_completed_flag_is_400(client, make_order):
    order = await make_order()

    resp = await client.post(
        f"/api/orders/{order.id}/progress", json={"eventType": "LLC_FILED"}
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "completed" in resp.json()["error"]["message"]


@pytest.mark.asyncio
async def test_gate_then_upload_then_toggle(client, make_order):
    """LLC_APPROVED is refused until the articles are uploaded, then accepted."""
    order = await make_order()
    url = f"/api/orders/{order.id}/progress"

    resp = await client.post(url, json={"eventType": "LLC_APPROVED", "completed": True})
    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["code"] == "DOCUMENT_REQUIRED"
    assert error["requiredDocumentType"] == "ARTICLES_OF_ORGANIZATION"

    upload = await client.post(
        "/api/orders/documents/upload",
        data={"orderId": order.id, "documentType": "ARTICLES_OF_ORGANIZATION"},
        files={"file": ("articles.pdf", b"%PDF-1.4 articles", "application/pdf")},
    )
    assert upload.status_code == 200

    # Reopen the step the upload just completed, then complete it by hand
    resp = await client.post(url, json={"eventType": "LLC_APPROVED", "completed": False})
    assert resp.status_code == 200
    resp = await client.post(url, json={"eventType": "LLC_APPROVED", "completed": True})
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_unexpected_failure_is_500(client, make_order, monkeypatch):
    from formation_api.services.order_progress import OrderProgressService

    async def explode(self, order_id, event_type, completed):
        raise RuntimeError("boom")

    monkeypatch.setattr(OrderProgressService, "set_event_completion", explode)
    order = await make_order()

    resp = await client.post(
        f"/api/orders/{order.id}/progress",
        json={"eventType": "LLC_FILED", "completed": True},
    )

    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "INTERNAL_ERROR"


@pytest.mark.asyncio
async def test_get_progress_summary(client, make_order, seed_events):
    order = await make_order(need_operating_agreement=True)
    await seed_events(order, "ORDER_RECEIVED")

    resp = await client.get(f"/api/orders/{order.id}/progress")

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["status"] == "PENDING_PROCESSING"
    assert data["totalCount"] == 4
    assert data["completedCount"] == 1
    assert data["percent"] == 25
    assert data["steps"][-1]["eventType"] == "OPERATING_AGREEMENT_GENERATED"
    assert data["steps"][-1]["requiredDocumentType"] == "OPERATING_AGREEMENT"
    assert data["steps"][0]["completed"] is True


@pytest.mark.asyncio
async def test_get_progress_unknown_order(client, db):
    resp = await client.get("/api/orders/nope/progress")
    assert resp.status_code == 404
