"""
Payment scheduling engine.

Turns a quote total and its payment terms into planned Payment records and
computes payment aggregates. Everything here is a pure function of its
inputs; persistence lives in PaymentRepository.

Amounts:
    fixed_amount when set, otherwise total * percentage / 100.

Due dates:
    the trigger event's date (supplied by the caller; "now" when unknown),
    or the term's custom_due_date for custom_date triggers, plus
    due_after_days.

Terms that do not add up to 100% or to the total are scheduled as they
are. validate_payment_terms reports the mismatch as a warning.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Union

from ..models import Payment, PaymentStatus, PaymentTerm, TriggerEvent
from ..storage import generate_id
from ..utils.datetime_utils import ensure_utc, parse_iso, utc_now

logger = logging.getLogger(__name__)

DateLike = Union[str, date, datetime, None]


@dataclass
class PaymentStats:
    """Aggregates recomputed on every read."""
    total_planned: float = 0.0
    total_paid: float = 0.0
    total_pending: float = 0.0
    total_overdue: float = 0.0
    payment_rate: float = 0.0  # paid / planned * 100

    def to_dict(self) -> Dict[str, float]:
        return {
            "totalPlanned": self.total_planned,
            "totalPaid": self.total_paid,
            "totalPending": self.total_pending,
            "totalOverdue": self.total_overdue,
            "paymentRate": self.payment_rate,
        }


def _trigger_key(value) -> str:
    return TriggerEvent(value).value


def resolve_planned_date(
    term: PaymentTerm,
    trigger_dates: Optional[Mapping[str, DateLike]] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """Due date of one term: base date for its trigger plus due_after_days."""
    now = ensure_utc(now) if now is not None else utc_now()
    dates = {_trigger_key(k): v for k, v in (trigger_dates or {}).items()}

    if term.trigger_event == TriggerEvent.CUSTOM_DATE:
        base = parse_iso(term.custom_due_date)
    else:
        base = parse_iso(dates.get(term.trigger_event.value))

    if base is None:
        base = now

    if term.due_after_days:
        base = base + timedelta(days=term.due_after_days)
    return base


def calculate_payment_schedule(
    total_amount: float,
    terms: Iterable[PaymentTerm],
    trigger_dates: Optional[Mapping[str, DateLike]] = None,
    now: Optional[datetime] = None,
    quote_id: Optional[str] = None,
) -> List[Payment]:
    """
    One pending Payment per active term, in term order.

    Args:
        total_amount: Quote total
        terms: Payment terms of the quote (inactive ones are skipped)
        trigger_dates: Known milestone dates keyed by trigger event,
            e.g. {"order_confirmation": "2024-03-01", "delivery": date(...)}
        now: Reference time for unknown milestones
        quote_id: Quote to link when a term carries no quote_id

    Returns:
        Unsaved Payment records with paid_amount 0
    """
    now = ensure_utc(now) if now is not None else utc_now()
    active = sorted((t for t in terms if t.is_active), key=lambda t: t.order)

    schedule = []
    for term in active:
        schedule.append(
            Payment(
                id=generate_id("payment"),
                quote_id=term.quote_id or quote_id or "",
                payment_term_id=term.id,
                planned_amount=term.amount_for(total_amount),
                paid_amount=0.0,
                planned_date=resolve_planned_date(term, trigger_dates, now),
                status=PaymentStatus.PENDING,
                created_at=now,
                updated_at=now,
            )
        )

    logger.debug(f"Calculated {len(schedule)} payments for total {total_amount:.2f}")
    return schedule


def unscheduled_terms(terms: Iterable[PaymentTerm], existing: Iterable[Payment]) -> List[PaymentTerm]:
    """Terms that have no payment yet, matched by payment_term_id."""
    scheduled_ids = {p.payment_term_id for p in existing if p.payment_term_id}
    return [t for t in terms if not t.id or t.id not in scheduled_ids]


def calculate_payment_stats(payments: Iterable[Payment], now: Optional[datetime] = None) -> PaymentStats:
    """
    Planned, paid, pending and overdue totals.

    Overdue is derived here (pending and past its planned date) and never
    written back to the payment.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    payments = list(payments)

    total_planned = sum(p.planned_amount for p in payments)
    total_paid = sum(p.paid_amount for p in payments)
    total_pending = sum(p.planned_amount for p in payments if p.status == PaymentStatus.PENDING)
    total_overdue = sum(p.planned_amount for p in payments if p.is_overdue(now))

    return PaymentStats(
        total_planned=total_planned,
        total_paid=total_paid,
        total_pending=total_pending,
        total_overdue=total_overdue,
        payment_rate=(total_paid / total_planned * 100) if total_planned > 0 else 0.0,
    )


def effective_status(payment: Payment, now: Optional[datetime] = None) -> PaymentStatus:
    """Status for display: pending payments past due read as overdue."""
    if payment.is_overdue(now):
        return PaymentStatus.OVERDUE
    return payment.status
