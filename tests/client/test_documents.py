from __future__ import annotations

import hashlib
import io

import pytest
import requests

from fakes import ScriptedAdapter
from workforce_portal.client import (
    ApiClient,
    DocumentUploader,
    InvalidDocument,
    LocalStore,
    compute_file_hash,
    format_file_size,
    validate_file,
)
from workforce_portal.client.storage import ONBOARDING_AUTH_KEY

BASE = "http://api.test"
CONTENT = b"%PDF-1.4 certificate " + b"z" * 4096
DIGEST = hashlib.sha256(CONTENT).hexdigest()
STORED = {"id": 41, "hash": DIGEST, "filename": "cac-certificate.pdf", "url": "/api/files/41/content"}


@pytest.fixture
def document(tmp_path):
    path = tmp_path / "cac-certificate.pdf"
    path.write_bytes(CONTENT)
    return path


@pytest.fixture
def store(tmp_path):
    store = LocalStore(tmp_path / "state.json")
    store.set(ONBOARDING_AUTH_KEY, {"userId": 3, "companyId": 9, "email": "grace@newco.test"})
    return store


def _uploader(adapter, store=None):
    session = requests.Session()
    session.mount(BASE, adapter)
    return DocumentUploader(ApiClient(BASE, session=session, current_path="/onboarding/documents"), store)


def test_hash_matches_hashlib_and_reports_progress():
    seen = []

    digest = compute_file_hash(io.BytesIO(CONTENT), chunk_size=1024, on_progress=seen.append)

    assert digest == DIGEST
    assert seen[-1] == 100.0
    assert seen == sorted(seen)


def test_hash_of_path(document):
    assert compute_file_hash(document) == DIGEST


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1536, "1.5 KB"), (10 * 1024 * 1024, "10 MB"), (3 * 1024**3, "3 GB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected


def test_validate_file_rules():
    too_big = validate_file("cac.pdf", 11 * 1024 * 1024, "application/pdf")
    wrong_type = validate_file("cac.exe", 4096, "application/x-msdownload", allowed_types=["application/pdf"])
    wrong_ext = validate_file("cac.pdf.zip", 4096, None, allowed_extensions=["pdf"])
    flagged = validate_file("sample-test.pdf", 200, "application/pdf", allowed_types=["application/pdf"])

    assert not too_big.is_valid and "exceeds maximum allowed size (10 MB)" in too_big.error
    assert not wrong_type.is_valid
    assert wrong_ext.error.startswith('File extension ".zip" is not allowed')
    assert flagged.is_valid
    assert len(flagged.warnings) == 2


def test_existing_file_is_attached_without_upload(document, store):
    adapter = ScriptedAdapter(
        (200, {"success": True, "data": {"exists": True, "file": STORED}}),
        (200, {"success": True, "data": {"companyId": 9, "fileId": 41, "documentType": "cac", "url": STORED["url"]}}),
    )

    outcome = _uploader(adapter, store).upload_document(9, "cac", document)

    assert outcome.reused is True
    assert outcome.file_id == 41
    assert [path for _, path in adapter.calls] == ["/api/files/check", "/api/files/attach-to-company"]


def test_missing_file_is_uploaded_then_attached(document, store):
    adapter = ScriptedAdapter(
        (200, {"success": True, "data": {"exists": False}}),
        (201, {"success": True, "data": {"file": STORED, "deduplicated": False}}),
        (200, {"success": True, "data": {"companyId": 9, "fileId": 41, "url": STORED["url"]}}),
    )

    outcome = _uploader(adapter, store).upload_document(9, "cac", document)

    assert outcome.reused is False
    assert outcome.url == STORED["url"]
    assert [path for _, path in adapter.calls] == [
        "/api/files/check",
        "/api/files/upload",
        "/api/files/attach-to-company",
    ]


def test_server_company_id_corrects_local_auth(document, store):
    adapter = ScriptedAdapter(
        (200, {"success": True, "data": {"exists": True, "file": STORED}}),
        (200, {"success": True, "data": {"companyId": 12, "fileId": 41}}),
    )

    outcome = _uploader(adapter, store).upload_document(9, "cac", document)

    assert outcome.company_id == 12
    assert store.get_auth()["companyId"] == 12
    assert store.get_auth()["email"] == "grace@newco.test"


def test_invalid_document_is_never_sent(tmp_path):
    path = tmp_path / "payroll.exe"
    path.write_bytes(b"MZ" * 1024)
    adapter = ScriptedAdapter()

    with pytest.raises(InvalidDocument):
        _uploader(adapter).upload_document(9, "cac", path)

    assert adapter.calls == []
