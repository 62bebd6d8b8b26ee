from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import DocumentType
from .model import CompanyFile, StoredFile


class FileRepository(Protocol):
    """Repository contract for stored files and their company links."""

    def get_by_id(self, file_id: int) -> Optional[StoredFile]:
        raise NotImplementedError

    def get_by_hash(self, file_hash: str) -> Optional[StoredFile]:
        raise NotImplementedError

    def create_file(
        self,
        *,
        file_hash: str,
        original_filename: str,
        mime_type: str,
        size: int,
        storage_path: str,
        uploaded_by: int,
    ) -> int:
        raise NotImplementedError

    def delete_file(self, file_id: int) -> bool:
        raise NotImplementedError

    def attach(
        self,
        *,
        company_id: int,
        file_id: int,
        document_type: DocumentType,
        attached_by: int,
        purpose: Optional[str] = None,
    ) -> None:
        """Link a file to a company, replacing any earlier file of the same type."""
        raise NotImplementedError

    def detach(self, company_id: int, file_id: int) -> int:
        """Remove every link of ``file_id`` to ``company_id``; returns links removed."""
        raise NotImplementedError

    def count_links(self, file_id: int) -> int:
        raise NotImplementedError

    def list_company_files(self, company_id: int, document_type: Optional[DocumentType] = None) -> Sequence[CompanyFile]:
        raise NotImplementedError

    def is_linked_to_company(self, company_id: int, file_id: int) -> bool:
        raise NotImplementedError
