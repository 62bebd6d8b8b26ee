from __future__ import annotations

from flask import Flask, Response, request

from ..auth.guards import build_guards, current_user
from ..common.responses import json_body, ok
from ..core.exceptions import ValidationError


def register(app: Flask, container) -> None:
    guards = build_guards(container)
    files = container.file_service

    @app.post("/api/files/check", endpoint="files_check")
    @guards.login_required
    def files_check():
        result = files.check(json_body())
        message = "File already exists - no upload needed" if result["exists"] else "File does not exist - proceed with upload"
        return ok(result, message)

    @app.post("/api/files/upload", endpoint="files_upload")
    @guards.login_required
    def files_upload():
        upload = request.files.get("document") or request.files.get("file")
        if upload is None:
            raise ValidationError("No file uploaded")
        result = files.upload(
            current_user(),
            content=upload.read(),
            filename=upload.filename or "",
            mime_type=upload.mimetype,
            client_hash=request.form.get("hash"),
        )
        message = "File already exists - using existing file" if result.deduplicated else "File uploaded successfully"
        return ok(result.to_dict(), message)

    @app.post("/api/files/attach-to-company", endpoint="files_attach")
    @guards.login_required
    def files_attach():
        payload = json_body()
        # Any companyId in the body is ignored; the session decides.
        data = files.attach_to_company(
            current_user(),
            file_id=payload.get("fileId"),
            document_type=payload.get("documentType"),
            purpose=payload.get("purpose"),
        )
        return ok(data, "File attached to company successfully")

    @app.get("/api/files/company", endpoint="files_company")
    @app.get("/api/files/company/<document_type>", endpoint="files_company_by_type")
    @guards.login_required
    def files_company(document_type=None):
        items = files.list_company_files(current_user(), document_type)
        return ok([i.to_dict() for i in items], "Company files retrieved successfully")

    @app.get("/api/files/<int:file_id>/content", endpoint="files_content")
    @guards.login_required
    def files_content(file_id: int):
        stored, content = files.read_content(current_user(), file_id)
        response = Response(content, mimetype=stored.mime_type)
        response.headers["Content-Disposition"] = f'inline; filename="{stored.original_filename}"'
        return response

    @app.delete("/api/files/<int:file_id>", endpoint="files_delete")
    @guards.login_required
    def files_delete(file_id: int):
        files.delete(current_user(), file_id)
        return ok(None, "File deleted successfully")
