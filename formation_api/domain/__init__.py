"""Domain package — all ORM models are imported here so Alembic autogenerate detects them.

Folder intent:
  order.py           — Orders with service flags, status and priority
  progress.py        — One progress checklist row per (order, event type)
  document.py        — Uploaded order documents (latest-per-type flag)
  status_history.py  — Append-only order status transitions
  audit.py           — Immutable request audit trail (never updated or deleted)
  enums.py           — Status / priority / event / document vocabularies
  mixins.py          — Shared TimestampMixin
"""

from formation_api.domain.audit import AuditTrail
from formation_api.domain.document import Document
from formation_api.domain.order import Order
from formation_api.domain.progress import OrderProgressEvent
from formation_api.domain.status_history import OrderStatusHistory

__all__ = [
    "AuditTrail",
    "Document",
    "Order",
    "OrderProgressEvent",
    "OrderStatusHistory",
]
