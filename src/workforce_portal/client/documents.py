"""Content-addressed document upload: hash, check, upload only if missing, attach."""

from __future__ import annotations

import hashlib
import io
import logging
import mimetypes
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Iterable, Optional, Union

from ..core.constants import DOCUMENT_MIME_TYPES, MAX_DOCUMENT_BYTES
from .errors import InvalidDocument
from .http import ApiClient
from .storage import ONBOARDING_AUTH_KEY, LocalStore

logger = logging.getLogger(__name__)

HASH_CHUNK_SIZE = 1024 * 1024
MIN_EXPECTED_BYTES = 1000
DOCUMENT_EXTENSIONS = ("pdf", "png", "jpg", "jpeg", "webp", "doc", "docx")
SUSPICIOUS_NAME = re.compile(r"test|dummy|sample|fake|temp|placeholder|example|demo|untitled", re.IGNORECASE)

Source = Union[str, os.PathLike, BinaryIO]


def compute_file_hash(
    source: Source,
    *,
    chunk_size: int = HASH_CHUNK_SIZE,
    on_progress: Optional[Callable[[float], None]] = None,
) -> str:
    """Streaming SHA-256 hex digest of a path or binary stream.

    ``on_progress`` receives the percentage read so far after every chunk.
    """
    if isinstance(source, (str, os.PathLike)):
        with open(source, "rb") as fh:
            return compute_file_hash(fh, chunk_size=chunk_size, on_progress=on_progress)

    total = _stream_size(source)
    digest = hashlib.sha256()
    read = 0
    for chunk in iter(lambda: source.read(chunk_size), b""):
        digest.update(chunk)
        read += len(chunk)
        if on_progress and total:
            on_progress(min(100.0, read * 100.0 / total))
    return digest.hexdigest()


def _stream_size(stream: BinaryIO) -> Optional[int]:
    try:
        pos = stream.tell()
        stream.seek(0, io.SEEK_END)
        size = stream.tell()
        stream.seek(pos)
    except (OSError, ValueError):
        return None
    return size - pos


def format_file_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    units = ("Bytes", "KB", "MB", "GB")
    i = 0
    while size >= 1024 ** (i + 1) and i < len(units) - 1:
        i += 1
    value = round(size / 1024**i, 2)
    return f"{value:g} {units[i]}"


@dataclass(frozen=True)
class FileValidation:
    is_valid: bool
    error: Optional[str] = None
    warnings: tuple[str, ...] = field(default_factory=tuple)


def validate_file(
    filename: str,
    size: int,
    mime_type: Optional[str],
    *,
    max_size: int = MAX_DOCUMENT_BYTES,
    allowed_types: Iterable[str] = (),
    allowed_extensions: Iterable[str] = (),
) -> FileValidation:
    warnings = []

    if size > max_size:
        return FileValidation(
            False,
            f"File size ({format_file_size(size)}) exceeds maximum allowed size ({format_file_size(max_size)})",
        )
    if size < MIN_EXPECTED_BYTES:
        warnings.append("File is very small - this might not be a valid document")

    types = list(allowed_types)
    if types and mime_type not in types:
        return FileValidation(False, f'File type "{mime_type}" is not allowed. Allowed types: {", ".join(types)}')

    extensions = list(allowed_extensions)
    if extensions:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in extensions:
            return FileValidation(
                False, f'File extension ".{ext}" is not allowed. Allowed extensions: {", ".join(extensions)}'
            )

    if SUSPICIOUS_NAME.search(filename):
        warnings.append("Filename suggests this might be a test or placeholder file")

    return FileValidation(True, warnings=tuple(warnings))


@dataclass(frozen=True)
class UploadOutcome:
    file_id: int
    company_id: int
    reused: bool
    url: Optional[str]
    warnings: tuple[str, ...] = ()


class DocumentUploader:
    def __init__(self, client: ApiClient, store: Optional[LocalStore] = None):
        self._client = client
        self._store = store

    def upload_document(self, company_id: Optional[int], document_type: str, path: Union[str, os.PathLike]) -> UploadOutcome:
        path = Path(path)
        content = path.read_bytes()
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"

        validation = validate_file(
            path.name,
            len(content),
            mime_type,
            allowed_types=sorted(DOCUMENT_MIME_TYPES),
            allowed_extensions=DOCUMENT_EXTENSIONS,
        )
        if not validation.is_valid:
            raise InvalidDocument(validation.error or "Invalid file")
        for warning in validation.warnings:
            logger.warning("%s: %s", path.name, warning)

        file_hash = compute_file_hash(io.BytesIO(content))
        check = self._client.post(
            "/api/files/check",
            json={"hash": file_hash, "filename": path.name, "size": len(content), "mimeType": mime_type},
        )["data"]

        if check.get("exists"):
            stored = check["file"]
            reused = True
            logger.info("Reusing stored file %s for %s", stored["id"], document_type)
        else:
            uploaded = self._client.post(
                "/api/files/upload",
                files={"document": (path.name, content, mime_type)},
                data={"hash": file_hash},
            )["data"]
            stored = uploaded["file"]
            reused = bool(uploaded.get("deduplicated"))

        attached = self._client.post(
            "/api/files/attach-to-company",
            json={"fileId": stored["id"], "documentType": document_type, "companyId": company_id},
        )["data"]

        actual_company = attached.get("companyId", company_id)
        if self._store is not None and actual_company != company_id:
            logger.info("Correcting stored company id %s -> %s", company_id, actual_company)
            self._store.update(ONBOARDING_AUTH_KEY, companyId=actual_company)

        return UploadOutcome(
            file_id=stored["id"],
            company_id=actual_company,
            reused=reused,
            url=attached.get("url") or stored.get("url"),
            warnings=validation.warnings,
        )
