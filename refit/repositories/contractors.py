"""
Contractor and contractor review repositories.

Reviews are stored under their own key. The contractor's rating block is a
cache of the review averages and is recomputed whenever a review is added
or deleted.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseRepository
from ..models import Contractor, ContractorRating, ContractorReview, ContractorStatus
from ..storage import StorageAdapter, StorageKeys
from ..utils.validation import ValidationResult, validate_contractor_data

logger = logging.getLogger(__name__)

REVIEW_SCORES = ("quality", "punctuality", "communication", "price")


def _round(value: float, digits: int = 0) -> float:
    # Half-up rounding, matching how ratings have always been displayed
    factor = 10 ** digits
    return int(value * factor + 0.5) / factor


class ContractorReviewRepository(BaseRepository[ContractorReview]):
    storage_key = StorageKeys.CONTRACTOR_REVIEWS
    model = ContractorReview
    id_prefix = "review"

    def get_by_contractor(self, contractor_id: str) -> List[ContractorReview]:
        reviews = self.filter_by(lambda r: r.contractor_id == contractor_id)
        return sorted(reviews, key=lambda r: r.date, reverse=True)

    def get_by_project(self, project_id: str) -> List[ContractorReview]:
        return self.filter_by(lambda r: r.project_id == project_id)


class ContractorRepository(BaseRepository[Contractor]):
    """Repository for contractors and their reviews."""

    storage_key = StorageKeys.CONTRACTORS
    model = Contractor
    id_prefix = "contractor"

    def __init__(self, storage: Optional[StorageAdapter] = None):
        super().__init__(storage)
        self.reviews = ContractorReviewRepository(self.storage)

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        return validate_contractor_data(data)

    # ==================== QUERIES ====================

    def get_by_status(self, status: ContractorStatus) -> List[Contractor]:
        status = ContractorStatus(status)
        return self.filter_by(lambda c: c.status == status)

    def get_active(self) -> List[Contractor]:
        return self.get_by_status(ContractorStatus.ACTIVE)

    def get_by_specialization(self, specialization: str) -> List[Contractor]:
        """Case-insensitive substring match on any specialization."""
        needle = specialization.lower()
        return self.filter_by(lambda c: any(needle in s.lower() for s in c.specializations))

    def get_specializations(self) -> List[str]:
        """Every specialization in use, sorted."""
        found = set()
        for contractor in self._load():
            found.update(contractor.specializations)
        return sorted(found)

    def search(self, query: str) -> List[Contractor]:
        if not query:
            return self._load()

        q = query.lower()
        return self.filter_by(
            lambda c: q in c.company_name.lower()
            or q in c.vat_number.lower()
            or q in c.contacts.referent_name.lower()
            or any(q in s.lower() for s in c.specializations)
        )

    def get_top_rated(self, limit: int = 5) -> List[Contractor]:
        rated = self.filter_by(lambda c: c.rating.reviews_count > 0)
        rated.sort(key=lambda c: (c.rating.overall, c.rating.reviews_count), reverse=True)
        return rated[:limit]

    # ==================== REVIEWS ====================

    def get_reviews(self, contractor_id: str) -> List[ContractorReview]:
        return self.reviews.get_by_contractor(contractor_id)

    def add_review(self, contractor_id: str, data: Dict[str, Any]) -> Optional[ContractorReview]:
        """
        Store a review and refresh the contractor's rating.

        `overall` is the rounded mean of the four sub-scores unless given.
        Returns None if the contractor does not exist.
        """
        if self.get(contractor_id) is None:
            logger.warning(f"Cannot review unknown contractor {contractor_id}")
            return None

        record = dict(data)
        record["contractor_id"] = contractor_id
        if not record.get("overall"):
            scores = [record.get(name, 0) or 0 for name in REVIEW_SCORES]
            record["overall"] = int(_round(sum(scores) / len(scores)))

        review = self.reviews.create(record)
        if review is None:
            return None

        self.recalculate_rating(contractor_id)
        return review

    def delete_review(self, review_id: str) -> bool:
        review = self.reviews.get(review_id)
        if review is None:
            return False
        if not self.reviews.delete(review_id):
            return False

        self.recalculate_rating(review.contractor_id)
        return True

    def recalculate_rating(self, contractor_id: str) -> Optional[Contractor]:
        """Average every review into the rating block (one decimal; zeros when no reviews remain)."""
        reviews = self.reviews.get_by_contractor(contractor_id)
        count = len(reviews)

        if count == 0:
            rating = ContractorRating()
        else:
            rating = ContractorRating(
                overall=_round(sum(r.overall for r in reviews) / count, 1),
                quality=_round(sum(r.quality for r in reviews) / count, 1),
                punctuality=_round(sum(r.punctuality for r in reviews) / count, 1),
                communication=_round(sum(r.communication for r in reviews) / count, 1),
                price=_round(sum(r.price for r in reviews) / count, 1),
                reviews_count=count,
            )

        logger.debug(f"Contractor {contractor_id} rating now {rating.overall} from {count} reviews")
        return self.update(contractor_id, {"rating": rating})


# Singleton
_contractor_repository: Optional[ContractorRepository] = None


def get_contractor_repository(storage: Optional[StorageAdapter] = None) -> ContractorRepository:
    """Get the contractor repository singleton."""
    global _contractor_repository
    if _contractor_repository is None:
        _contractor_repository = ContractorRepository(storage)
    return _contractor_repository
