"""
Document repository.

Documents are linked to one project, contractor, location or quote via
related_to. Archived documents stay stored with is_active off and are left
out of the related-entity queries.
"""

import logging
from typing import List, Optional

from .base import BaseRepository
from ..models import Document, DocumentRelatedType, ProjectDocumentCategory
from ..storage import StorageAdapter, StorageKeys

logger = logging.getLogger(__name__)


class DocumentRepository(BaseRepository[Document]):
    """Repository for uploaded documents."""

    storage_key = StorageKeys.DOCUMENTS
    model = Document
    id_prefix = "document"

    def get_active(self) -> List[Document]:
        return self.filter_by(lambda d: d.is_active)

    def get_by_related(self, related_type: DocumentRelatedType, related_id: str) -> List[Document]:
        """Active documents attached to one entity."""
        related_type = DocumentRelatedType(related_type)
        return self.filter_by(
            lambda d: d.is_active and d.related_to.type == related_type and d.related_to.id == related_id
        )

    def get_by_quote(self, quote_id: str) -> List[Document]:
        return self.get_by_related(DocumentRelatedType.QUOTE, quote_id)

    def get_by_project_category(self, project_id: str, category: ProjectDocumentCategory) -> List[Document]:
        category = ProjectDocumentCategory(category)
        return [
            d for d in self.get_by_related(DocumentRelatedType.PROJECT, project_id)
            if d.project_category == category
        ]

    def archive(self, document_id: str) -> Optional[Document]:
        """Hide a document from related-entity queries without deleting it."""
        document = self.update(document_id, {"is_active": False})
        if document is not None:
            logger.info(f"Archived document {document.name}")
        return document


# Singleton
_document_repository: Optional[DocumentRepository] = None


def get_document_repository(storage: Optional[StorageAdapter] = None) -> DocumentRepository:
    """Get the document repository singleton."""
    global _document_repository
    if _document_repository is None:
        _document_repository = DocumentRepository(storage)
    return _document_repository
