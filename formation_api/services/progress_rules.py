"""Order progress rules — which steps are required, which need a document,
and what order status a set of completed steps implies.

Everything here is pure: no session, no I/O. The services load state,
call into these functions and persist whatever they return.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from formation_api.core.exceptions import InvalidDocumentTypeError, InvalidEventTypeError
from formation_api.domain.enums import DocumentType, OrderStatus, ProgressEventType

# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

BASE_REQUIRED_STEPS: tuple[ProgressEventType, ...] = (
    ProgressEventType.ORDER_RECEIVED,
    ProgressEventType.LLC_FILED,
    ProgressEventType.LLC_APPROVED,
)

EIN_STEPS: tuple[ProgressEventType, ...] = (
    ProgressEventType.EIN_FILED,
    ProgressEventType.EIN_OBTAINED,
)

# Progress event -> document that must exist before it can be completed
EVENT_REQUIRED_DOCUMENT: dict[ProgressEventType, DocumentType] = {
    ProgressEventType.LLC_APPROVED: DocumentType.ARTICLES_OF_ORGANIZATION,
    ProgressEventType.EIN_OBTAINED: DocumentType.EIN_CONFIRMATION,
    ProgressEventType.OPERATING_AGREEMENT_GENERATED: DocumentType.OPERATING_AGREEMENT,
    ProgressEventType.BANK_RESOLUTION_LETTER_GENERATED: DocumentType.BANK_RESOLUTION_LETTER,
}

# Uploading one of these documents completes the matching event
DOCUMENT_COMPLETES_EVENT: dict[DocumentType, ProgressEventType] = {
    document: event for event, document in EVENT_REQUIRED_DOCUMENT.items()
}

# Filing either of these moves a pending order into processing
FILING_STEPS: frozenset[ProgressEventType] = frozenset(
    {ProgressEventType.LLC_FILED, ProgressEventType.EIN_FILED}
)

# Only reachable through manual admin action; never left by derivation
TERMINAL_STATUSES: frozenset[OrderStatus] = frozenset(
    {OrderStatus.CANCELLED, OrderStatus.REFUNDED}
)

EVENT_LABELS: dict[ProgressEventType, str] = {
    ProgressEventType.ORDER_RECEIVED: "Order Received",
    ProgressEventType.LLC_FILED: "LLC Filed with State",
    ProgressEventType.LLC_APPROVED: "LLC Approved (State)",
    ProgressEventType.EIN_FILED: "EIN Filed with IRS",
    ProgressEventType.EIN_OBTAINED: "EIN Obtained",
    ProgressEventType.OPERATING_AGREEMENT_GENERATED: "Operating Agreement Generated",
    ProgressEventType.BANK_RESOLUTION_LETTER_GENERATED: "Bank Resolution Letter Generated",
}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_event_type(value: object) -> ProgressEventType:
    """Return the event type named by *value* or raise InvalidEventTypeError."""
    try:
        return ProgressEventType(value)
    except ValueError:
        raise InvalidEventTypeError(value) from None


def parse_document_type(value: object) -> DocumentType:
    """Return the document type named by *value* or raise InvalidDocumentTypeError."""
    try:
        return DocumentType(value)
    except ValueError:
        raise InvalidDocumentTypeError(value) from None


# ---------------------------------------------------------------------------
# Required-step resolver
# ---------------------------------------------------------------------------

def required_steps(
    need_ein: bool,
    need_operating_agreement: bool,
    need_bank_letter: bool,
) -> list[ProgressEventType]:
    """Steps that must be completed for an order with these service flags.

    Ordering is stable (base steps, EIN, operating agreement, bank letter)
    so callers can display the list as-is.
    """
    steps = list(BASE_REQUIRED_STEPS)
    if need_ein:
        steps.extend(EIN_STEPS)
    if need_operating_agreement:
        steps.append(ProgressEventType.OPERATING_AGREEMENT_GENERATED)
    if need_bank_letter:
        steps.append(ProgressEventType.BANK_RESOLUTION_LETTER_GENERATED)
    return steps


def required_steps_for(order) -> list[ProgressEventType]:
    """:func:`required_steps` for anything carrying the three service flags."""
    return required_steps(
        need_ein=order.need_ein,
        need_operating_agreement=order.need_operating_agreement,
        need_bank_letter=order.need_bank_letter,
    )


# ---------------------------------------------------------------------------
# Document gate
# ---------------------------------------------------------------------------

def required_document(event_type: ProgressEventType) -> DocumentType | None:
    return EVENT_REQUIRED_DOCUMENT.get(event_type)


def can_complete(event_type: ProgressEventType, document_types: Iterable[str]) -> bool:
    """True when *event_type* needs no document, or one of the required type exists.

    Any row of the required type satisfies the gate, latest or not.
    """
    needed = required_document(event_type)
    if needed is None:
        return True
    return needed.value in {str(getattr(d, "value", d)) for d in document_types}


# ---------------------------------------------------------------------------
# Status deriver
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StatusDecision:
    previous: OrderStatus
    derived: OrderStatus

    @property
    def changed(self) -> bool:
        return self.previous != self.derived


def derive_status(
    current: OrderStatus,
    completed: Iterable[str],
    required: Iterable[ProgressEventType],
) -> StatusDecision:
    """Derive the order status implied by the *completed* event types.

    Rules, both evaluated against the persisted *current* status:

    1. PENDING_PROCESSING with LLC_FILED or EIN_FILED completed -> PROCESSING.
    2. Any non-terminal status with every required step completed -> COMPLETED.

    Rule 2 wins when both fire, so a pending order can reach COMPLETED in a
    single call. Nothing here ever moves an order backwards.
    """
    done = {str(getattr(e, "value", e)) for e in completed}
    derived = current

    if current == OrderStatus.PENDING_PROCESSING and any(
        step.value in done for step in FILING_STEPS
    ):
        derived = OrderStatus.PROCESSING

    if current not in TERMINAL_STATUSES and all(step.value in done for step in required):
        derived = OrderStatus.COMPLETED

    return StatusDecision(previous=current, derived=derived)
