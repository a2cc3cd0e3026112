from __future__ import annotations

from typing import Any

import structlog
from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from .actor import Actor

logger = structlog.get_logger(__name__)

_STATUS_CODES = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (StateConflictError, 409),
)


def current_actor() -> Actor:
    """Identity forwarded by the upstream auth layer."""

    raw_id = request.headers.get("X-User-Id")
    raw_role = (request.headers.get("X-User-Role") or "").strip().lower()
    try:
        user_id = int(raw_id or "")
    except ValueError:
        raise AuthenticationError("Missing or invalid X-User-Id header") from None
    try:
        role = Role(raw_role)
    except ValueError:
        raise AuthenticationError("Missing or invalid X-User-Role header") from None
    return Actor(user_id=user_id, role=role)


def json_body() -> dict:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def success(data: Any, status: int = 200, **extra: Any):
    return jsonify({"status": "success", "data": data, **extra}), status


def fail(message: str, status: int):
    return jsonify({"status": "fail", "message": message}), status


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for exc_type, status in _STATUS_CODES:
            if isinstance(exc, exc_type):
                return fail(str(exc), status)
        return fail(str(exc), 400)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return fail(exc.description or exc.name, exc.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        logger.exception("http.unhandled_error", path=request.path, method=request.method)
        return fail("Internal server error", 500)
