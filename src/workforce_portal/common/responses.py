"""JSON envelope helpers shared by every controller.

All API responses share the shape ``{"success": bool, "data": ..., "message": str}``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from ..core.exceptions import DomainError, ValidationError

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: Optional[str] = None, status: int = 200, **extra: Any):
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return jsonify(body), status


def fail(message: str, status: int = 400, **extra: Any):
    body: dict[str, Any] = {"success": False, "message": message}
    body.update(extra)
    return jsonify(body), status


def json_body() -> dict:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(error: DomainError):
        extra: dict[str, Any] = dict(error.details)
        if error.code:
            extra["code"] = error.code
        if error.status_code == 401:
            extra.setdefault("requiresLogin", True)
        return fail(error.message or "Request failed", error.status_code, **extra)

    @app.errorhandler(RequestEntityTooLarge)
    def handle_too_large(_error):
        return fail("Uploaded file is too large", 413)

    @app.errorhandler(404)
    def handle_not_found(_error):
        if request.path.startswith("/api/"):
            return fail("Endpoint not found", 404)
        return fail("Not found", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(_error):
        return fail("Method not allowed", 405)

    @app.errorhandler(Exception)
    def handle_unexpected(error: Exception):
        if isinstance(error, HTTPException):
            return fail(error.description or error.name, error.code or 500)
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail(f"Internal server error: {error}", 500)
        return fail("Internal server error", 500)
