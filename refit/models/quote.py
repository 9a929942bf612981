"""Quote, payment term, payment and payment template data models."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field, model_validator

from config import settings
from .base import DateOnly, RefitModel, UtcDatetime
from ..utils.datetime_utils import ensure_utc, utc_now


class QuoteStatus(str, Enum):
    DRAFT = "draft"
    SENT = "sent"
    RECEIVED = "received"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    EXPIRED = "expired"


PENDING_QUOTE_STATUSES = (QuoteStatus.SENT, QuoteStatus.RECEIVED, QuoteStatus.UNDER_REVIEW)


class PaymentTermType(str, Enum):
    ADVANCE = "advance"
    PROGRESS = "progress"
    COMPLETION = "completion"
    RETENTION = "retention"
    BALANCE = "balance"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"  # advisory, derived from plannedDate on read
    CANCELLED = "cancelled"


class TriggerEvent(str, Enum):
    """Milestone that anchors a payment term's due date."""
    ORDER_CONFIRMATION = "order_confirmation"
    DELIVERY = "delivery"
    INSTALLATION_START = "installation_start"
    INSTALLATION_COMPLETE = "installation_complete"
    APPROVAL = "approval"
    CUSTOM_DATE = "custom_date"


class TemplateCategory(str, Enum):
    STANDARD = "standard"
    CUSTOM = "custom"
    INDUSTRY_SPECIFIC = "industry_specific"


class QuoteItem(RefitModel):
    id: str = ""
    description: str
    quantity: float = 1.0
    unit_price: float = 0.0
    total_price: float = 0.0
    unit: str = "pz"  # pz, mq, h...
    category: str = ""


class PaymentTerm(RefitModel):
    """
    Rule for one installment of a quote.

    Exactly one of percentage / fixed_amount is expected. Both set is
    rejected; neither set yields a zero amount and is flagged by
    validate_payment_terms.
    """

    id: str = ""
    quote_id: str = ""
    description: str = ""
    type: PaymentTermType = PaymentTermType.ADVANCE
    percentage: Optional[float] = None
    fixed_amount: Optional[float] = None
    due_after_days: Optional[int] = None
    trigger_event: TriggerEvent = TriggerEvent.ORDER_CONFIRMATION
    custom_due_date: Optional[DateOnly] = None
    conditions: Optional[str] = None
    vat_included: bool = True
    order: int = 0
    is_active: bool = True

    @model_validator(mode="after")
    def _percentage_xor_fixed(self) -> "PaymentTerm":
        if self.percentage is not None and self.fixed_amount is not None:
            raise ValueError("percentage and fixed_amount are mutually exclusive")
        return self

    def amount_for(self, total_amount: float) -> float:
        """Planned amount of this term for a quote total."""
        if self.fixed_amount is not None:
            return self.fixed_amount
        if self.percentage is not None:
            return total_amount * self.percentage / 100
        return 0.0


class Payment(RefitModel):
    """One planned or actual installment against a quote."""

    id: str
    quote_id: str
    payment_term_id: str = ""
    planned_amount: float = 0.0
    paid_amount: float = 0.0
    planned_date: UtcDatetime
    payment_date: Optional[UtcDatetime] = None
    status: PaymentStatus = PaymentStatus.PENDING
    method: Optional[PaymentMethod] = None
    reference: Optional[str] = None  # transfer or cheque number
    invoice_number: Optional[str] = None
    notes: Optional[str] = None
    fees: Optional[float] = None
    exchange_rate: Optional[float] = None
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Pending and past its planned date."""
        now = ensure_utc(now) if now is not None else utc_now()
        return self.status == PaymentStatus.PENDING and self.planned_date < now

    @property
    def outstanding(self) -> float:
        return max(0.0, self.planned_amount - self.paid_amount)


class PaymentTemplate(RefitModel):
    """Reusable set of payment terms (id and quote_id left empty)."""

    id: str
    name: str
    description: str = ""
    payment_terms: List[PaymentTerm] = Field(default_factory=list)
    category: TemplateCategory = TemplateCategory.CUSTOM
    is_default: bool = False
    created_at: UtcDatetime = Field(default_factory=utc_now)


class QuoteApproval(RefitModel):
    approved_by: Optional[str] = None
    approved_at: Optional[UtcDatetime] = None
    rejection_reason: Optional[str] = None


class PaymentConfig(RefitModel):
    vat_rate: Optional[float] = None
    withholding_tax_rate: Optional[float] = None
    retention_rate: Optional[float] = None
    payment_method: Optional[PaymentMethod] = None
    bank_details: Optional[str] = None


class Quote(RefitModel):
    """A contractor's priced proposal against a project and optionally its phases."""

    id: str
    project_id: str
    phase_id: Optional[str] = None
    phase_ids: List[str] = Field(default_factory=list)
    contractor_id: str
    quote_number: str
    status: QuoteStatus = QuoteStatus.DRAFT
    request_date: Optional[DateOnly] = None
    response_date: Optional[DateOnly] = None
    valid_until: Optional[DateOnly] = None
    total_amount: float = 0.0
    currency: str = Field(default_factory=lambda: settings.currency)
    items: List[QuoteItem] = Field(default_factory=list)
    terms: str = ""
    notes: str = ""
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    approval: QuoteApproval = Field(default_factory=QuoteApproval)
    payment_terms: List[PaymentTerm] = Field(default_factory=list)
    payments: List[Payment] = Field(default_factory=list)
    payment_config: PaymentConfig = Field(default_factory=PaymentConfig)
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)

    @property
    def items_total(self) -> float:
        return sum(item.total_price for item in self.items)

    def covers_phase(self, phase_id: str) -> bool:
        return self.phase_id == phase_id or phase_id in self.phase_ids
