"""
Quote repository.

A quote may cover one or several phases. Older records only carry the
single `phaseId`; both fields are kept in step on create.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from ..exceptions import EntityValidationError
from ..models import PENDING_QUOTE_STATUSES, PaymentMethod, Quote, QuoteStatus
from ..storage import StorageAdapter, StorageKeys, generate_id
from ..utils.datetime_utils import utc_now
from ..utils.validation import (
    AMOUNT_TOLERANCE,
    ValidationResult,
    validate_payment_terms,
    validate_quote_data,
)

logger = logging.getLogger(__name__)

DEFAULT_VAT_RATE = 22.0


def _with_term_ids(terms: List[Any], quote_id: str) -> List[Any]:
    """Give every payment term an id and link it to the quote."""
    result = []
    for term in terms:
        term = dict(term) if isinstance(term, dict) else term.model_dump()
        if not term.get("id"):
            term["id"] = generate_id("term")
        term["quote_id"] = quote_id
        result.append(term)
    return result


class QuoteRepository(BaseRepository[Quote]):
    """Repository for contractor quotes."""

    storage_key = StorageKeys.QUOTES
    model = Quote
    id_prefix = "quote"

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = validate_quote_data(data)
        terms = data.get("payment_terms") or []
        if terms:
            term_check = validate_payment_terms(terms, data.get("total_amount") or 0.0)
            if not term_check.is_valid or result.field_errors:
                field_errors = {**term_check.field_errors, **result.field_errors}
                return ValidationResult.failure(
                    errors=list(field_errors.values()),
                    warnings=result.warnings + term_check.warnings,
                    field_errors=field_errors,
                )
            result.warnings.extend(term_check.warnings)
        return result

    def create(self, data: Dict[str, Any]) -> Optional[Quote]:
        record = dict(data)
        record["id"] = record.get("id") or generate_id(self.id_prefix)

        phase_ids = list(record.get("phase_ids") or [])
        if not phase_ids and record.get("phase_id"):
            phase_ids = [record["phase_id"]]
        record["phase_ids"] = phase_ids
        record["phase_id"] = phase_ids[0] if phase_ids else record.get("phase_id")

        record["payment_terms"] = _with_term_ids(record.get("payment_terms") or [], record["id"])
        record.setdefault("payment_config", {
            "vat_rate": DEFAULT_VAT_RATE,
            "payment_method": PaymentMethod.BANK_TRANSFER,
        })
        return super().create(record)

    def update(self, entity_id: str, updates: Dict[str, Any]) -> Optional[Quote]:
        """Merge updates; replacement payment terms get ids like on create."""
        if "payment_terms" in updates:
            updates = dict(updates)
            updates["payment_terms"] = _with_term_ids(updates["payment_terms"] or [], entity_id)
        return super().update(entity_id, updates)

    def _parse(self, raw: Any) -> Optional[Quote]:
        quote = super()._parse(raw)
        if quote is not None and not quote.phase_ids and quote.phase_id:
            quote = quote.model_copy(update={"phase_ids": [quote.phase_id]})
        return quote

    # ==================== QUERIES ====================

    def get_by_project(self, project_id: str) -> List[Quote]:
        return self.filter_by(lambda q: q.project_id == project_id)

    def get_by_contractor(self, contractor_id: str) -> List[Quote]:
        return self.filter_by(lambda q: q.contractor_id == contractor_id)

    def get_by_phase(self, phase_id: str) -> List[Quote]:
        """Quotes covering the phase, either as the single phase or one of several."""
        return self.filter_by(lambda q: q.covers_phase(phase_id))

    def get_by_status(self, status: QuoteStatus) -> List[Quote]:
        status = QuoteStatus(status)
        return self.filter_by(lambda q: q.status == status)

    def get_pending(self) -> List[Quote]:
        """Sent, received or under review."""
        return self.filter_by(lambda q: q.status in PENDING_QUOTE_STATUSES)

    # ==================== WORKFLOW ====================

    def approve(self, quote_id: str, approved_by: str) -> Optional[Quote]:
        quote = self.get(quote_id)
        if quote is None:
            return None

        approval = quote.approval.model_copy(update={
            "approved_by": approved_by,
            "approved_at": utc_now(),
            "rejection_reason": None,
        })
        logger.info(f"Quote {quote.quote_number} approved by {approved_by}")
        return self.update(quote_id, {"status": QuoteStatus.APPROVED, "approval": approval})

    def reject(self, quote_id: str, reason: str = "") -> Optional[Quote]:
        quote = self.get(quote_id)
        if quote is None:
            return None

        approval = quote.approval.model_copy(update={"rejection_reason": reason})
        logger.info(f"Quote {quote.quote_number} rejected: {reason}")
        return self.update(quote_id, {"status": QuoteStatus.REJECTED, "approval": approval})

    def set_payment_terms(self, quote_id: str, terms: List[Any]) -> Optional[Quote]:
        """Replace the quote's payment terms. A total mismatch is logged, not rejected."""
        quote = self.get(quote_id)
        if quote is None:
            return None

        check = validate_payment_terms(terms, quote.total_amount)
        for warning in check.warnings:
            logger.warning(f"Quote {quote.quote_number}: {warning}")
        if not check.is_valid:
            raise EntityValidationError(check.field_errors)

        return self.update(quote_id, {"payment_terms": _with_term_ids(terms, quote_id)})

    # ==================== TOTALS ====================

    @staticmethod
    def items_total(quote: Quote) -> float:
        return quote.items_total

    @staticmethod
    def check_totals(quote: Quote) -> ValidationResult:
        """Warn when total_amount differs from the sum of the line items."""
        if not quote.items:
            return ValidationResult.success()

        items_total = quote.items_total
        if abs(items_total - quote.total_amount) >= AMOUNT_TOLERANCE:
            return ValidationResult.success([
                f"Quote total {quote.total_amount:.2f} differs from the sum of its items {items_total:.2f}"
            ])
        return ValidationResult.success()

    def get_total_by_project(self, project_id: str, approved_only: bool = True) -> float:
        quotes = self.get_by_project(project_id)
        if approved_only:
            quotes = [q for q in quotes if q.status == QuoteStatus.APPROVED]
        return sum(q.total_amount for q in quotes)


# Singleton
_quote_repository: Optional[QuoteRepository] = None


def get_quote_repository(storage: Optional[StorageAdapter] = None) -> QuoteRepository:
    """Get the quote repository singleton."""
    global _quote_repository
    if _quote_repository is None:
        _quote_repository = QuoteRepository(storage)
    return _quote_repository
