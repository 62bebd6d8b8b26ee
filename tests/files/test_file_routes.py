from __future__ import annotations

import hashlib
import io

PDF = b"%PDF-1.4 route test " + b"y" * 2048
PDF_HASH = hashlib.sha256(PDF).hexdigest()


def _upload(client, content=PDF, digest=PDF_HASH):
    return client.post(
        "/api/files/upload",
        data={"document": (io.BytesIO(content), "cac.pdf", "application/pdf"), "hash": digest},
        content_type="multipart/form-data",
    )


def test_check_upload_attach_flow(login, owner):
    client = login(owner)

    check = client.post(
        "/api/files/check", json={"hash": PDF_HASH, "filename": "cac.pdf", "size": len(PDF), "mimeType": "application/pdf"}
    )
    uploaded = _upload(client)
    again = _upload(client)
    file_id = uploaded.get_json()["data"]["file"]["id"]
    attached = client.post(
        "/api/files/attach-to-company", json={"fileId": file_id, "documentType": "cac", "companyId": 999}
    )
    listed = client.get("/api/files/company/cac")
    content = client.get(f"/api/files/{file_id}/content")

    assert check.get_json()["data"] == {"exists": False}
    assert uploaded.get_json()["data"]["deduplicated"] is False
    assert again.get_json()["data"]["deduplicated"] is True
    assert attached.get_json()["data"]["companyId"] == owner.company_id
    assert [f["id"] for f in listed.get_json()["data"]] == [file_id]
    assert content.data == PDF
    assert content.mimetype == "application/pdf"


def test_upload_hash_mismatch_is_400(login, owner):
    resp = _upload(login(owner), digest="f" * 64)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Hash mismatch - file may be corrupted"


def test_upload_without_file_is_400(login, owner):
    resp = login(owner).post("/api/files/upload", data={}, content_type="multipart/form-data")

    assert resp.status_code == 400
