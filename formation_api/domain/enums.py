"""Fixed vocabularies for orders, progress events and documents.

Values are stored as plain strings (VARCHAR) so new members never need a
schema change; the enums are the application-side source of truth.
"""

from enum import Enum


class OrderStatus(str, Enum):
    PENDING_PROCESSING = "PENDING_PROCESSING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class OrderPriority(str, Enum):
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ProgressEventType(str, Enum):
    ORDER_RECEIVED = "ORDER_RECEIVED"
    LLC_FILED = "LLC_FILED"
    LLC_APPROVED = "LLC_APPROVED"
    EIN_FILED = "EIN_FILED"
    EIN_OBTAINED = "EIN_OBTAINED"
    OPERATING_AGREEMENT_GENERATED = "OPERATING_AGREEMENT_GENERATED"
    BANK_RESOLUTION_LETTER_GENERATED = "BANK_RESOLUTION_LETTER_GENERATED"


class DocumentType(str, Enum):
    ARTICLES_OF_ORGANIZATION = "ARTICLES_OF_ORGANIZATION"
    OPERATING_AGREEMENT = "OPERATING_AGREEMENT"
    EIN_CONFIRMATION = "EIN_CONFIRMATION"
    BANK_RESOLUTION_LETTER = "BANK_RESOLUTION_LETTER"
    INVOICE = "INVOICE"
    RECEIPT = "RECEIPT"


# Recorded as changed_by on transitions derived from progress, never a user id.
SYSTEM_ACTOR = "system"
