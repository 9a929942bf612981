"""
Payment and payment template repositories.

Payments are stored flat under their own key and linked to quotes by
quote_id. Schedules generated from payment terms are merged by
payment_term_id, so regenerating a schedule never duplicates a term.
"""

import logging
from datetime import datetime
from typing import Any, List, Mapping, Optional

from .base import BaseRepository
from ..models import (
    Payment,
    PaymentStatus,
    PaymentTemplate,
    PaymentTerm,
    PaymentTermType,
    Quote,
    TemplateCategory,
    TriggerEvent,
)
from ..services.payment_schedule import (
    DateLike,
    PaymentStats,
    calculate_payment_schedule,
    calculate_payment_stats,
    unscheduled_terms,
)
from ..storage import StorageAdapter, StorageKeys, generate_id
from ..utils.datetime_utils import ensure_utc, utc_now

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = 0.01


class PaymentRepository(BaseRepository[Payment]):
    """Repository for planned and actual payments."""

    storage_key = StorageKeys.PAYMENTS
    model = Payment
    id_prefix = "payment"

    def get_by_quote(self, quote_id: str) -> List[Payment]:
        payments = self.filter_by(lambda p: p.quote_id == quote_id)
        return sorted(payments, key=lambda p: p.planned_date)

    def get_by_status(self, status: PaymentStatus) -> List[Payment]:
        status = PaymentStatus(status)
        return self.filter_by(lambda p: p.status == status)

    def get_overdue(self, now: Optional[datetime] = None) -> List[Payment]:
        """Pending payments whose planned date has passed."""
        now = ensure_utc(now) if now is not None else utc_now()
        return self.filter_by(lambda p: p.is_overdue(now))

    def get_stats(self, quote_id: Optional[str] = None, now: Optional[datetime] = None) -> PaymentStats:
        payments = self.get_by_quote(quote_id) if quote_id else self._load()
        return calculate_payment_stats(payments, now)

    def sync_schedule(
        self,
        quote: Quote,
        trigger_dates: Optional[Mapping[str, DateLike]] = None,
        now: Optional[datetime] = None,
    ) -> List[Payment]:
        """
        Create payments for the quote's terms that have none yet.

        Idempotent: terms already represented by a payment are skipped.
        Returns only the newly created payments.
        """
        if any(not term.id for term in quote.payment_terms):
            quote = self._assign_term_ids(quote)
            if quote is None:
                return []

        existing = self.get_by_quote(quote.id)
        pending_terms = unscheduled_terms(quote.payment_terms, existing)
        if not pending_terms:
            logger.debug(f"Quote {quote.id} schedule already complete")
            return []

        new_payments = calculate_payment_schedule(
            quote.total_amount, pending_terms, trigger_dates, now, quote_id=quote.id
        )
        if not new_payments:
            return []

        items = self.storage.get(self.storage_key)
        items.extend(p.to_storage() for p in new_payments)
        if not self.storage.set(self.storage_key, items):
            return []

        logger.info(f"Scheduled {len(new_payments)} payments for quote {quote.id}")
        return new_payments

    def _assign_term_ids(self, quote: Quote) -> Optional[Quote]:
        """
        Give id-less terms an id and persist them on the stored quote.

        Payments are matched to terms by id, so a term without one cannot
        be scheduled idempotently. Returns None when the ids could not be
        written back.
        """
        terms = [
            term if term.id else term.model_copy(update={"id": generate_id("term"), "quote_id": quote.id})
            for term in quote.payment_terms
        ]
        stored = self.storage.update(
            StorageKeys.QUOTES, quote.id, {"paymentTerms": [t.to_storage() for t in terms]}
        )
        if not stored:
            logger.warning(f"Quote {quote.id} has payment terms without ids; schedule not generated")
            return None
        return quote.model_copy(update={"payment_terms": terms})

    def record_payment(
        self,
        payment_id: str,
        amount: float,
        payment_date: Optional[datetime] = None,
        **details: Any,
    ) -> Optional[Payment]:
        """
        Add an amount to what has been paid against a planned payment.

        Status becomes `paid` once the planned amount is covered and
        `partial` before that. Extra keyword details (method, reference,
        invoice_number, notes) are stored as given.
        """
        payment = self.get(payment_id)
        if payment is None:
            return None

        paid = payment.paid_amount + amount
        if paid + AMOUNT_TOLERANCE >= payment.planned_amount:
            status = PaymentStatus.PAID
        elif paid > 0:
            status = PaymentStatus.PARTIAL
        else:
            status = payment.status

        updates = dict(details)
        updates.update({
            "paid_amount": paid,
            "status": status,
            "payment_date": payment_date or utc_now(),
        })
        logger.info(f"Recorded {amount:.2f} on payment {payment_id} ({status.value})")
        return self.update(payment_id, updates)

    def cancel(self, payment_id: str) -> Optional[Payment]:
        return self.update(payment_id, {"status": PaymentStatus.CANCELLED})

    def delete_by_quote(self, quote_id: str) -> int:
        """Remove every payment of a quote; returns how many were removed."""
        items = self.storage.get(self.storage_key)
        kept = [item for item in items if item.get("quoteId") != quote_id]
        removed = len(items) - len(kept)
        if removed and not self.storage.set(self.storage_key, kept):
            return 0
        return removed


def default_payment_templates() -> List[PaymentTemplate]:
    """Built-in templates seeded on first read of the template store."""
    now = utc_now()

    def term(description, term_type, percentage, trigger, days, order):
        return PaymentTerm(
            description=description,
            type=term_type,
            percentage=percentage,
            trigger_event=trigger,
            due_after_days=days,
            vat_included=True,
            order=order,
            is_active=True,
        )

    return [
        PaymentTemplate(
            id=generate_id("template"),
            name="Standard 30-70",
            description="30% advance on order, 70% balance on delivery",
            category=TemplateCategory.STANDARD,
            is_default=True,
            created_at=now,
            payment_terms=[
                term("Advance 30%", PaymentTermType.ADVANCE, 30, TriggerEvent.ORDER_CONFIRMATION, 0, 1),
                term("Balance 70%", PaymentTermType.BALANCE, 70, TriggerEvent.DELIVERY, 0, 2),
            ],
        ),
        PaymentTemplate(
            id=generate_id("template"),
            name="Progressive 50-25-25",
            description="50% advance, 25% on work progress, 25% balance",
            category=TemplateCategory.STANDARD,
            created_at=now,
            payment_terms=[
                term("Advance 50%", PaymentTermType.ADVANCE, 50, TriggerEvent.ORDER_CONFIRMATION, 0, 1),
                term("Progress 25%", PaymentTermType.PROGRESS, 25, TriggerEvent.INSTALLATION_START, 0, 2),
                term("Balance 25%", PaymentTermType.COMPLETION, 25, TriggerEvent.INSTALLATION_COMPLETE, 30, 3),
            ],
        ),
        PaymentTemplate(
            id=generate_id("template"),
            name="Single payment",
            description="100% at 30 days from delivery",
            category=TemplateCategory.STANDARD,
            created_at=now,
            payment_terms=[
                term("Single payment", PaymentTermType.COMPLETION, 100, TriggerEvent.DELIVERY, 30, 1),
            ],
        ),
    ]


class PaymentTemplateRepository(BaseRepository[PaymentTemplate]):
    """Reusable payment term sets; the built-in ones are written on first read."""

    storage_key = StorageKeys.PAYMENT_TEMPLATES
    model = PaymentTemplate
    id_prefix = "template"

    def _load(self) -> List[PaymentTemplate]:
        self.seed_defaults()
        return super()._load()

    def get(self, entity_id: str) -> Optional[PaymentTemplate]:
        self.seed_defaults()
        return super().get(entity_id)

    def seed_defaults(self) -> bool:
        """Write the built-in templates if the key has never been written."""
        if self.storage.get_value(self.storage_key) is not None:
            return False
        templates = default_payment_templates()
        ok = self._save(templates)
        if ok:
            logger.info(f"Seeded {len(templates)} default payment templates")
        return ok

    def get_default(self) -> Optional[PaymentTemplate]:
        for template in self._load():
            if template.is_default:
                return template
        return None

    def get_by_category(self, category: TemplateCategory) -> List[PaymentTemplate]:
        category = TemplateCategory(category)
        return self.filter_by(lambda t: t.category == category)

    def apply_template(self, template_id: str, quote_id: str) -> List[PaymentTerm]:
        """Fresh copies of the template's terms, with new ids, linked to quote_id."""
        template = self.get(template_id)
        if template is None:
            logger.warning(f"Payment template {template_id} not found")
            return []

        return [
            term.model_copy(update={"id": generate_id("term"), "quote_id": quote_id})
            for term in sorted(template.payment_terms, key=lambda t: t.order)
        ]


# Singletons
_payment_repository: Optional[PaymentRepository] = None
_payment_template_repository: Optional[PaymentTemplateRepository] = None


def get_payment_repository(storage: Optional[StorageAdapter] = None) -> PaymentRepository:
    """Get the payment repository singleton."""
    global _payment_repository
    if _payment_repository is None:
        _payment_repository = PaymentRepository(storage)
    return _payment_repository


def get_payment_template_repository(storage: Optional[StorageAdapter] = None) -> PaymentTemplateRepository:
    """Get the payment template repository singleton."""
    global _payment_template_repository
    if _payment_template_repository is None:
        _payment_template_repository = PaymentTemplateRepository(storage)
    return _payment_template_repository
