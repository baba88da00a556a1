from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DependencyError,
    DomainError,
    QRCodeRejected,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ConflictError, 409),
    (DependencyError, 503),
)


def error_response(exc: Exception):
    """JSON body + HTTP status for an exception raised by a service call."""

    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            body = {"success": False, "message": str(exc)}
            if isinstance(exc, QRCodeRejected) and exc.reason is not None:
                body["reason"] = exc.reason.value
            return jsonify(body), status

    if isinstance(exc, DomainError):
        return jsonify({"success": False, "message": str(exc)}), 400

    logger.exception("Unhandled error", exc_info=exc)
    return jsonify({"success": False, "message": "Internal server error"}), 500


def current_role():
    try:
        return Role(session.get("role"))
    except ValueError:
        return None


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(AuthenticationError("Please log in to continue"))
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response(AuthenticationError("Please log in to continue"))
        if current_role() != Role.ADMIN:
            return error_response(AuthorizationError("Administrator access required"))
        return view(*args, **kwargs)

    return wrapper
