"""Contractor, certification and review data models."""

from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import Field

from .base import DateOnly, RefitModel, UtcDatetime
from .location import Address
from ..utils.datetime_utils import utc_now


class ContractorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BLACKLISTED = "blacklisted"


class ContractorContacts(RefitModel):
    phone: str = ""
    email: str = ""
    website: Optional[str] = None
    referent_name: str = ""
    referent_phone: Optional[str] = None
    referent_email: Optional[str] = None


class Certification(RefitModel):
    id: str
    name: str
    issued_by: str = ""
    number: str = ""
    issue_date: Optional[DateOnly] = None
    expiry_date: Optional[DateOnly] = None
    document_url: Optional[str] = None

    def is_expired(self, today: date) -> bool:
        return self.expiry_date is not None and self.expiry_date < today


class ContractorRating(RefitModel):
    """Averages over the contractor's reviews (1-5 scale, 0 = no reviews)."""
    overall: float = 0.0
    quality: float = 0.0
    punctuality: float = 0.0
    communication: float = 0.0
    price: float = 0.0
    reviews_count: int = 0


class ContractorProjects(RefitModel):
    completed: int = 0
    in_progress: int = 0
    total_value: float = 0.0


class Contractor(RefitModel):
    """A company that quotes for and works on project phases."""

    id: str
    company_name: str
    vat_number: str = ""
    address: Address = Field(default_factory=Address)
    contacts: ContractorContacts = Field(default_factory=ContractorContacts)
    specializations: List[str] = Field(default_factory=list)  # free-form: electrical, plumbing...
    certifications: List[Certification] = Field(default_factory=list)
    rating: ContractorRating = Field(default_factory=ContractorRating)
    projects: ContractorProjects = Field(default_factory=ContractorProjects)
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    status: ContractorStatus = ContractorStatus.ACTIVE
    created_at: UtcDatetime = Field(default_factory=utc_now)
    updated_at: UtcDatetime = Field(default_factory=utc_now)


class ContractorReview(RefitModel):
    """One review; stored apart from the contractor and averaged into its rating."""

    id: str
    contractor_id: str
    project_id: Optional[str] = None
    reviewer_name: str
    reviewer_role: str = "Project Manager"
    quality: int = Field(default=0, ge=0, le=5)
    punctuality: int = Field(default=0, ge=0, le=5)
    communication: int = Field(default=0, ge=0, le=5)
    price: int = Field(default=0, ge=0, le=5)
    overall: int = Field(default=0, ge=0, le=5)
    comment: str = ""
    date: UtcDatetime = Field(default_factory=utc_now)
    is_verified: bool = True
