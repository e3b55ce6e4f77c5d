"""Order document uploads.

Storing a tracked document type (articles, EIN letter, operating agreement,
bank resolution letter) completes its progress event on the spot and
re-derives the order status, with no separate toggle.
"""

import logging
import re

from sqlalchemy.ext.asyncio import AsyncSession

from formation_api.core import clock
from formation_api.core.exceptions import NotFoundError
from formation_api.db.base import transaction
from formation_api.domain.document import Document
from formation_api.domain.enums import DocumentType
from formation_api.repositories.document import DocumentRepository
from formation_api.repositories.order import OrderRepository
from formation_api.repositories.progress import ProgressEventRepository
from formation_api.services import progress_rules
from formation_api.services.order_progress import OrderProgressService
from formation_api.storage.base import DocumentStorage

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")


def sanitize_filename(file_name: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", file_name)


def build_storage_path(order_id: str, document_type: DocumentType, file_name: str) -> str:
    """``orders/<order>/<TYPE>_<epoch ms>_<sanitized name>``"""
    timestamp = int(clock.utcnow().timestamp() * 1000)
    return f"orders/{order_id}/{document_type.value}_{timestamp}_{sanitize_filename(file_name)}"


class DocumentService:
    def __init__(self, session: AsyncSession, storage: DocumentStorage):
        self._session = session
        self._storage = storage
        self._orders = OrderRepository(session)
        self._documents = DocumentRepository(session)
        self._events = ProgressEventRepository(session)
        self._progress = OrderProgressService(session)

    async def upload_document(
        self,
        order_id: str,
        document_type: str,
        file_name: str,
        content: bytes,
        content_type: str | None = None,
    ) -> Document:
        doc_type = progress_rules.parse_document_type(document_type)

        async with transaction(self._session):
            order = await self._orders.get_for_update(order_id)
            if not order:
                raise NotFoundError("Order", order_id)

            stored = await self._storage.put(
                build_storage_path(order_id, doc_type, file_name),
                content,
                content_type=content_type,
            )

            await self._documents.demote_latest(order_id, doc_type.value)
            document = await self._documents.create(
                order_id=order_id,
                document_type=doc_type.value,
                file_name=file_name,
                file_path=stored.path,
                file_size=stored.size,
                content_type=content_type,
                is_latest=True,
                is_final=True,
            )
            logger.info(
                "Order %s: stored %s (%d bytes) at %s",
                order_id, doc_type.value, stored.size, stored.path,
            )

            event = progress_rules.DOCUMENT_COMPLETES_EVENT.get(doc_type)
            if event is not None:
                # The document itself satisfies the gate, so no can_complete check
                await self._events.set_completed_at(
                    order_id, event.value, clock.utcnow()
                )
                await self._progress.apply_derived_status(
                    order,
                    notes=(
                        f"Status updated based on document upload: "
                        f"{doc_type.value} completed {event.value}"
                    ),
                )

        return document
