from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import Flask, g, jsonify, request

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    DomainError,
    DuplicatePayrollError,
    FuturePeriodError,
    InsufficientBalanceError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

EMPLOYEE_HEADER = "X-Employee-Id"
ROLE_HEADER = "X-Role"


@dataclass(frozen=True)
class Actor:
    """Caller identity, as asserted by the fronting gateway."""

    employee_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _actor_from_headers() -> Optional[Actor]:
    raw_id = request.headers.get(EMPLOYEE_HEADER)
    if not raw_id:
        return None
    try:
        return Actor(employee_id=int(raw_id), role=Role(request.headers.get(ROLE_HEADER, Role.EMPLOYEE.value)))
    except ValueError:
        return None


def current_actor() -> Actor:
    return g.actor


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = _actor_from_headers()
        if actor is None:
            return jsonify({"message": "Not authorized"}), 401
        g.actor = actor
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        actor = _actor_from_headers()
        if actor is None:
            return jsonify({"message": "Not authorized"}), 401
        if not actor.is_admin:
            return jsonify({"message": "Not authorized as an admin"}), 403
        g.actor = actor
        return view(*args, **kwargs)

    return wrapper


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def body_date(data: dict, key: str):
    value = data.get(key)
    if not value:
        raise ValidationError(f"{key} is required")
    try:
        return parse_iso_date(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{key} must be YYYY-MM-DD")


def query_int(name: str) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be a number")


_STATUS_BY_ERROR = (
    (InsufficientBalanceError, 400),
    (ValidationError, 400),
    (FuturePeriodError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicatePayrollError, 409),
    (InvalidStateError, 409),
    (ConfigurationError, 409),
)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(e, kind)), 400)
        body = {"message": str(e)}
        if isinstance(e, InsufficientBalanceError):
            body.update(
                {
                    "leaveType": e.leave_type,
                    "remaining": e.remaining,
                    "pending": e.pending,
                    "requested": e.requested,
                }
            )
        logger.info("%s %s -> %s: %s", request.method, request.path, status, e)
        return jsonify(body), status
