"""Document data models and the project document category catalogue."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field

from .base import RefitModel, UtcDatetime
from ..utils.datetime_utils import utc_now


class DocumentType(str, Enum):
    CONTRACT = "contract"
    INVOICE = "invoice"
    QUOTE = "quote"
    CERTIFICATION = "certification"
    PERMIT = "permit"
    PLAN = "plan"
    PHOTO = "photo"
    OTHER = "other"


class DocumentRelatedType(str, Enum):
    PROJECT = "project"
    CONTRACTOR = "contractor"
    LOCATION = "location"
    QUOTE = "quote"


class ProjectDocumentCategory(str, Enum):
    TECHNICAL_DRAWINGS = "technical_drawings"
    TECHNICAL_SPECS = "technical_specs"
    TECHNICAL_REPORTS = "technical_reports"
    STRUCTURAL_CALCS = "structural_calcs"
    MATERIAL_SPECS = "material_specs"
    MUNICIPAL_PERMITS = "municipal_permits"
    AUTHORIZATIONS = "authorizations"
    LICENSES = "licenses"
    ENTITY_OPINIONS = "entity_opinions"
    COMPLIANCE_CERTS = "compliance_certs"
    CONTRACTS = "contracts"
    SPECIFICATIONS = "specifications"
    SITE_MINUTES = "site_minutes"
    OFFICIAL_COMMS = "official_comms"
    CORRESPONDENCE = "correspondence"
    QUOTES_OFFERS = "quotes_offers"
    INVOICES = "invoices"
    PROGRESS_REPORTS = "progress_reports"
    PAYMENT_CERTS = "payment_certs"
    VARIATIONS = "variations"
    INSPECTION_REPORTS = "inspection_reports"
    QUALITY_REPORTS = "quality_reports"
    TESTS_APPROVALS = "tests_approvals"
    NON_COMPLIANCE = "non_compliance"
    CORRECTIVE_ACTIONS = "corrective_actions"
    PHOTOS_BEFORE = "photos_before"
    PHOTOS_DURING = "photos_during"
    PHOTOS_AFTER = "photos_after"
    PHOTOS_PROGRESS = "photos_progress"
    PHOTOS_DAMAGE = "photos_damage"
    OTHER = "other"


@dataclass(frozen=True)
class DocumentCategoryInfo:
    category: ProjectDocumentCategory
    label: str
    group: str


def _info(category: ProjectDocumentCategory, label: str, group: str) -> DocumentCategoryInfo:
    return DocumentCategoryInfo(category=category, label=label, group=group)


C = ProjectDocumentCategory

PROJECT_DOCUMENT_CATEGORIES: List[DocumentCategoryInfo] = [
    _info(C.TECHNICAL_DRAWINGS, "Technical drawings", "Technical"),
    _info(C.TECHNICAL_SPECS, "Technical specifications", "Technical"),
    _info(C.TECHNICAL_REPORTS, "Technical reports", "Technical"),
    _info(C.STRUCTURAL_CALCS, "Structural calculations", "Technical"),
    _info(C.MATERIAL_SPECS, "Material data sheets", "Technical"),
    _info(C.MUNICIPAL_PERMITS, "Municipal permits", "Approvals"),
    _info(C.AUTHORIZATIONS, "Authorizations", "Approvals"),
    _info(C.LICENSES, "Licenses", "Approvals"),
    _info(C.ENTITY_OPINIONS, "Authority opinions", "Approvals"),
    _info(C.COMPLIANCE_CERTS, "Compliance certificates", "Approvals"),
    _info(C.CONTRACTS, "Contracts", "Administrative"),
    _info(C.SPECIFICATIONS, "Tender specifications", "Administrative"),
    _info(C.SITE_MINUTES, "Site minutes", "Administrative"),
    _info(C.OFFICIAL_COMMS, "Official communications", "Administrative"),
    _info(C.CORRESPONDENCE, "Correspondence", "Administrative"),
    _info(C.QUOTES_OFFERS, "Quotes and offers", "Financial"),
    _info(C.INVOICES, "Invoices", "Financial"),
    _info(C.PROGRESS_REPORTS, "Progress statements", "Financial"),
    _info(C.PAYMENT_CERTS, "Payment certificates", "Financial"),
    _info(C.VARIATIONS, "Variations", "Financial"),
    _info(C.INSPECTION_REPORTS, "Inspection reports", "Control"),
    _info(C.QUALITY_REPORTS, "Quality reports", "Control"),
    _info(C.TESTS_APPROVALS, "Tests and acceptance", "Control"),
    _info(C.NON_COMPLIANCE, "Non-compliance", "Control"),
    _info(C.CORRECTIVE_ACTIONS, "Corrective actions", "Control"),
    _info(C.PHOTOS_BEFORE, "Photos before works", "Photos"),
    _info(C.PHOTOS_DURING, "Photos during works", "Photos"),
    _info(C.PHOTOS_AFTER, "Photos after works", "Photos"),
    _info(C.PHOTOS_PROGRESS, "Progress photos", "Photos"),
    _info(C.PHOTOS_DAMAGE, "Damage photos", "Photos"),
    _info(C.OTHER, "Other", "Other"),
]

del C


def get_category_info(category: ProjectDocumentCategory) -> Optional[DocumentCategoryInfo]:
    category = ProjectDocumentCategory(category)
    for info in PROJECT_DOCUMENT_CATEGORIES:
        if info.category == category:
            return info
    return None


def get_category_label(category: str) -> str:
    """Display label for a category; unknown values are returned as given."""
    try:
        info = get_category_info(category)
    except ValueError:
        return category
    return info.label if info else category


def categories_by_group() -> Dict[str, List[DocumentCategoryInfo]]:
    """Catalogue grouped by group name, in catalogue order."""
    groups: Dict[str, List[DocumentCategoryInfo]] = {}
    for info in PROJECT_DOCUMENT_CATEGORIES:
        groups.setdefault(info.group, []).append(info)
    return groups


class RelatedEntity(RefitModel):
    type: DocumentRelatedType
    id: str


class Document(RefitModel):
    """An uploaded file attached to a project, contractor, location or quote."""

    id: str
    name: str
    type: DocumentType = DocumentType.OTHER
    category: str = ""
    project_category: Optional[ProjectDocumentCategory] = None
    size: int = 0  # bytes
    mime_type: str = ""
    url: str = ""
    uploaded_by: str = ""
    uploaded_at: UtcDatetime = Field(default_factory=utc_now)
    related_to: RelatedEntity
    tags: List[str] = Field(default_factory=list)
    version: int = 1
    is_active: bool = True
