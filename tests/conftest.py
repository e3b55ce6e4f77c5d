"""Shared fixtures: a throwaway SQLite database and storage root per test session."""
import os
import tempfile
import uuid
from datetime import datetime, timezone

_TMP_DIR = tempfile.mkdtemp(prefix="formation-api-tests-")

# Must be set before formation_api.core.config is imported
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["STORAGE_LOCAL_PATH"] = os.path.join(_TMP_DIR, "storage")
os.environ["APP_ENV"] = "test"
os.environ["AUDIT_ENABLED"] = "false"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from formation_api.db.base import Base, async_session_factory, engine
from formation_api.domain.order import Order
from formation_api.main import app
from formation_api.repositories.document import DocumentRepository
from formation_api.repositories.progress import ProgressEventRepository
from formation_api.storage import reset_document_storage


@pytest.fixture
def storage_root() -> str:
    return os.environ["STORAGE_LOCAL_PATH"]


@pytest_asyncio.fixture
async def db():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def session(db):
    async with async_session_factory() as s:
        yield s


@pytest_asyncio.fixture
async def client(db):
    reset_document_storage()
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()
    reset_document_storage()


@pytest.fixture
def make_order(session):
    async def _make(**overrides) -> Order:
        values = {
            "order_number": f"ORD-{uuid.uuid4().hex[:8].upper()}",
            "company_name": "Acme Holdings LLC",
            "contact_email": "owner@acme.test",
            "need_ein": False,
            "need_operating_agreement": False,
            "need_bank_letter": False,
        }
        values.update(overrides)
        order = Order(**values)
        session.add(order)
        await session.commit()
        return order

    return _make


@pytest.fixture
def seed_events(session):
    """Mark event types completed directly in the database, bypassing every rule."""
    async def _seed(order: Order, *event_types: str) -> None:
        repo = ProgressEventRepository(session)
        for event_type in event_types:
            await repo.set_completed_at(order.id, event_type, datetime.now(timezone.utc))
        await session.commit()

    return _seed


@pytest.fixture
def seed_document(session):
    """Insert a document row without touching storage or progress."""
    async def _seed(order: Order, document_type: str, is_latest: bool = True):
        document = await DocumentRepository(session).create(
            order_id=order.id,
            document_type=document_type,
            file_name=f"{document_type.lower()}.pdf",
            file_path=f"orders/{order.id}/{document_type}.pdf",
            file_size=128,
            content_type="application/pdf",
            is_latest=is_latest,
        )
        await session.commit()
        return document

    return _seed
