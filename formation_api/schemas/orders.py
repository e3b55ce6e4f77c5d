"""Order, progress, document and status-history schemas (request DTOs and response models)."""


from datetime import datetime

from pydantic import BaseModel, Field

from formation_api.domain.enums import OrderPriority, OrderStatus
from formation_api.schemas.common import CamelModel

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ProgressToggleRequest(CamelModel):
    # Plain string: unknown values are rejected by the service as INVALID_EVENT_TYPE
    event_type: str
    completed: bool

class OrderStatusUpdate(CamelModel):
    status: OrderStatus | None = None
    priority: OrderPriority | None = None
    notes: str | None = None
    changed_by: str = Field(min_length=1, max_length=100)

# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class DocumentOut(CamelModel):
    id: str
    order_id: str
    document_type: str
    file_name: str
    file_path: str
    file_size: int
    content_type: str | None = None
    is_latest: bool
    is_final: bool
    generated_at: datetime

class DocumentUploadResponse(BaseModel):
    """`{ success: true, document: {...} }`"""

    success: bool = True
    document: DocumentOut

class StatusHistoryOut(CamelModel):
    id: str
    previous_status: str | None = None
    new_status: str
    changed_by: str
    notes: str | None = None
    created_at: datetime

class OrderOut(CamelModel):
    id: str
    order_number: str
    company_name: str
    contact_email: str | None = None
    need_ein: bool
    need_operating_agreement: bool
    need_bank_letter: bool
    status: str
    priority: str
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

class OrderDetailOut(OrderOut):
    documents: list[DocumentOut] = Field(default_factory=list)
    status_history: list[StatusHistoryOut] = Field(default_factory=list)

class ProgressStepOut(CamelModel):
    event_type: str
    label: str
    completed: bool
    completed_at: datetime | None = None
    required_document_type: str | None = None
    has_required_document: bool

class OrderProgressOut(CamelModel):
    order_id: str
    status: str
    steps: list[ProgressStepOut]
    completed_count: int
    total_count: int
    percent: int
