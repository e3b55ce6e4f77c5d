"""SQLAlchemy ORM model for formation Orders.

An order is created by the purchase flow; this service only moves its
status (derived from progress, or by manual admin override) and reads it.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from formation_api.db.base import Base
from formation_api.domain.enums import OrderPriority, OrderStatus
from formation_api.domain.mixins import TimestampMixin


class Order(Base, TimestampMixin):
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    order_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # Service selections that decide which progress steps are required
    need_ein: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    need_operating_agreement: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    need_bank_letter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # PENDING_PROCESSING | PROCESSING | COMPLETED | CANCELLED | REFUNDED
    status: Mapped[str] = mapped_column(
        String(50), default=OrderStatus.PENDING_PROCESSING.value, nullable=False, index=True
    )
    # NORMAL | HIGH | URGENT
    priority: Mapped[str] = mapped_column(
        String(20), default=OrderPriority.NORMAL.value, nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    progress_events: Mapped[List["OrderProgressEvent"]] = relationship(
        back_populates="order", lazy="noload", cascade="all, delete-orphan"
    )
    documents: Mapped[List["Document"]] = relationship(
        back_populates="order", lazy="noload", cascade="all, delete-orphan"
    )
    status_history: Mapped[List["OrderStatusHistory"]] = relationship(
        back_populates="order", lazy="noload"
    )
