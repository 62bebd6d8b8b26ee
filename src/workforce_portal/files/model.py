from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import DocumentType


@dataclass(frozen=True)
class StoredFile:
    """A blob identified by the SHA-256 of its content."""

    file_id: int
    file_hash: str
    original_filename: str
    mime_type: str
    size: int
    storage_path: str
    uploaded_by: int
    created_at: Optional[datetime] = None

    @property
    def url(self) -> str:
        return f"/api/files/{self.file_id}/content"

    def to_dict(self) -> dict:
        return {
            "id": self.file_id,
            "hash": self.file_hash,
            "filename": self.original_filename,
            "mimeType": self.mime_type,
            "size": self.size,
            "url": self.url,
            "uploadedBy": self.uploaded_by,
            "createdAt": iso_or_none(self.created_at),
        }


@dataclass(frozen=True)
class CompanyFile:
    """Link of a stored file to a company under one document type."""

    company_id: int
    file: StoredFile
    document_type: DocumentType
    attached_by: int
    purpose: Optional[str] = None
    attached_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = self.file.to_dict()
        data.update(
            {
                "companyId": self.company_id,
                "documentType": self.document_type.value,
                "purpose": self.purpose,
                "attachedAt": iso_or_none(self.attached_at),
            }
        )
        return data
