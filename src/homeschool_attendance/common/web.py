from __future__ import annotations

from datetime import datetime, timezone
from functools import wraps

from flask import Flask, jsonify, request, session

from ..app_logger import get_logger
from ..core.exceptions import ConstraintViolation, DomainError, NotFoundError, StorageError, ValidationError

logger = get_logger("web")

_STATUS_BY_ERROR = (
    (ValidationError, 400, "VALIDATION_ERROR"),
    (NotFoundError, 404, "NOT_FOUND"),
    (ConstraintViolation, 409, "CONSTRAINT_VIOLATION"),
    (StorageError, 503, "STORAGE_ERROR"),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def error_body(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}, "generated_at": _now_iso()}


def login_required(view):
    """Reject requests without an owner identity in the session.

    ``session["user_id"]`` is set by the external sign-in flow; it is trusted as given.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        if not session.get("user_id"):
            return jsonify(error_body("UNAUTHENTICATED", "Sign in to continue")), 401
        return view(*args, **kwargs)

    return wrapper


def current_owner() -> str:
    return str(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        for cls, status, code in _STATUS_BY_ERROR:
            if isinstance(exc, cls):
                if status >= 500:
                    logger.error("%s %s failed: %s", request.method, request.path, exc)
                message = "Storage is unavailable" if status >= 500 and not app.config.get("DEBUG") else str(exc)
                return jsonify(error_body(code, message)), status
        return jsonify(error_body("DOMAIN_ERROR", str(exc))), 400
