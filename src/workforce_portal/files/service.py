from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Collection, List, Optional, Tuple

from werkzeug.utils import secure_filename

from ..auth.model import CurrentUser
from ..common.validators import require_choice, require_fields, require_int, require_sha256
from ..companies.repository import CompanyRepository
from ..core.constants import DOCUMENT_MIME_TYPES, MANAGEMENT_ROLES, MAX_DOCUMENT_BYTES
from ..core.enums import DocumentType
from ..core.exceptions import AuthenticationError, AuthorizationError, NotFoundError, ValidationError
from .model import CompanyFile, StoredFile
from .repository import FileRepository
from .storage import LocalFileStorage

logger = logging.getLogger(__name__)


def sha256_hex(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


@dataclass(frozen=True)
class UploadResult:
    file: StoredFile
    deduplicated: bool

    def to_dict(self) -> dict:
        return {"file": self.file.to_dict(), "deduplicated": self.deduplicated}


class FileService:
    """Use case: content-addressed document storage shared across companies."""

    def __init__(self, files: FileRepository, storage: LocalFileStorage, companies: CompanyRepository):
        self._files = files
        self._storage = storage
        self._companies = companies

    def check(self, payload: dict) -> dict:
        require_fields(payload, ("hash", "filename", "size", "mimeType"))
        file_hash = require_sha256(payload.get("hash"))
        require_int(payload.get("size"), "size", min_value=0)

        existing = self._files.get_by_hash(file_hash)
        if existing:
            return {"exists": True, "file": existing.to_dict()}
        return {"exists": False}

    def upload(
        self,
        actor: CurrentUser,
        *,
        content: bytes,
        filename: str,
        mime_type: str,
        client_hash: Optional[str] = None,
        allowed_types: Collection[str] = DOCUMENT_MIME_TYPES,
        max_bytes: int = MAX_DOCUMENT_BYTES,
    ) -> UploadResult:
        if not content:
            raise ValidationError("No file uploaded")
        if len(content) > max_bytes:
            raise ValidationError(f"File is too large. Maximum size is {max_bytes // (1024 * 1024)}MB")
        mime_type = (mime_type or "").split(";")[0].strip().lower()
        if mime_type not in allowed_types:
            raise ValidationError(f"File type {mime_type or 'unknown'} is not allowed")

        file_hash = sha256_hex(content)
        if client_hash:
            if require_sha256(client_hash) != file_hash:
                raise ValidationError("Hash mismatch - file may be corrupted")

        existing = self._files.get_by_hash(file_hash)
        if existing:
            logger.info("Upload by user %s deduplicated to file %s", actor.user_id, existing.file_id)
            return UploadResult(file=existing, deduplicated=True)

        storage_path = self._storage.save(file_hash, content)
        file_id = self._files.create_file(
            file_hash=file_hash,
            original_filename=secure_filename(filename or "") or "upload",
            mime_type=mime_type,
            size=len(content),
            storage_path=storage_path,
            uploaded_by=actor.user_id,
        )
        stored = self._files.get_by_id(file_id)
        if not stored:
            raise NotFoundError("File not found")
        logger.info("User %s uploaded file %s (%d bytes)", actor.user_id, file_id, stored.size)
        return UploadResult(file=stored, deduplicated=False)

    def attach_to_company(
        self,
        actor: CurrentUser,
        *,
        file_id: Any,
        document_type: Any,
        purpose: Optional[str] = None,
    ) -> dict:
        if file_id in (None, "") or not document_type:
            raise ValidationError("Missing required fields: fileId, documentType")
        if actor.company_id is None:
            raise AuthenticationError("No company in session. Please log in again.")

        doc_type = require_choice(document_type, DocumentType, "documentType")
        stored = self._files.get_by_id(require_int(file_id, "fileId", min_value=1))
        if not stored:
            raise NotFoundError("File not found")
        if not self._companies.get_by_id(actor.company_id):
            raise NotFoundError("Company not found. Please complete registration and company setup first.")

        self._files.attach(
            company_id=actor.company_id,
            file_id=stored.file_id,
            document_type=doc_type,
            attached_by=actor.user_id,
            purpose=purpose,
        )
        logger.info("File %s attached to company %s as %s", stored.file_id, actor.company_id, doc_type.value)
        return {
            "companyId": actor.company_id,
            "fileId": stored.file_id,
            "documentType": doc_type.value,
            "url": stored.url,
        }

    def list_company_files(self, actor: CurrentUser, document_type: Optional[str] = None) -> List[CompanyFile]:
        if actor.company_id is None:
            raise ValidationError("User is not associated with a company")
        doc_type = require_choice(document_type, DocumentType, "documentType") if document_type else None
        return list(self._files.list_company_files(actor.company_id, doc_type))

    def delete(self, actor: CurrentUser, file_id: int) -> None:
        stored = self._files.get_by_id(file_id)
        linked = stored is not None and actor.company_id is not None and self._files.is_linked_to_company(
            actor.company_id, file_id
        )
        if not stored or (not linked and stored.uploaded_by != actor.user_id):
            raise NotFoundError("File not found")
        if stored.uploaded_by != actor.user_id and actor.role not in MANAGEMENT_ROLES:
            raise AuthorizationError("Only the uploader or a company admin can delete this file")

        if linked:
            self._files.detach(actor.company_id, file_id)
        if self._files.count_links(file_id) == 0:
            self._files.delete_file(file_id)
            self._storage.delete(stored.storage_path)
            logger.info("File %s deleted by user %s", file_id, actor.user_id)
        else:
            logger.info("File %s detached from company %s, still referenced elsewhere", file_id, actor.company_id)

    def read_content(self, actor: CurrentUser, file_id: int) -> Tuple[StoredFile, bytes]:
        stored = self._files.get_by_id(file_id)
        visible = stored is not None and (
            stored.uploaded_by == actor.user_id
            or (actor.company_id is not None and self._files.is_linked_to_company(actor.company_id, file_id))
        )
        if not visible:
            raise NotFoundError("File not found")
        return stored, self._storage.read(stored.storage_path)
