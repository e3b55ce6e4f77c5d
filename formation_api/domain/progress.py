"""SQLAlchemy ORM model for order progress events (checklist rows)."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formation_api.db.base import Base
from formation_api.domain.mixins import TimestampMixin


class OrderProgressEvent(Base, TimestampMixin):
    """One checklist step of an order. ``completed_at IS NULL`` means not done."""

    __tablename__ = "order_progress_events"
    __table_args__ = (
        UniqueConstraint("order_id", "event_type", name="uq_order_progress_event_type"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    order_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(50), nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    order: Mapped["Order"] = relationship(back_populates="progress_events")

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None
