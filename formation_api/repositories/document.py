"""Document repository."""

from sqlalchemy import select, update

from formation_api.domain.document import Document
from formation_api.repositories.base import BaseRepository


class DocumentRepository(BaseRepository[Document]):
    model = Document

    async def document_types_for_order(self, order_id: str) -> set[str]:
        """Every document type with at least one row for the order, latest or not."""
        result = await self._session.execute(
            select(Document.document_type).where(Document.order_id == order_id).distinct()
        )
        return set(result.scalars().all())

    async def demote_latest(self, order_id: str, document_type: str) -> int:
        """Clear is_latest on the current latest row(s) of this (order, type)."""
        result = await self._session.execute(
            update(Document)
            .where(Document.order_id == order_id)
            .where(Document.document_type == document_type)
            .where(Document.is_latest.is_(True))
            .values(is_latest=False)
            .execution_options(synchronize_session="fetch")
        )
        await self._session.flush()
        return result.rowcount
