from __future__ import annotations

import dataclasses
import io
import logging
from datetime import date, datetime
from enum import Enum
from functools import wraps
from typing import Any, Optional, Type, TypeVar

import pandas as pd
from flask import Flask, jsonify, request, send_file, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    PasswordChangeRequired,
    RemoteStoreError,
    ValidationError,
)
from ..users.model import Principal
from .datetime_utils import parse_iso_date

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def to_json(value: Any) -> Any:
    """Dataclasses, enums and dates to plain JSON types (dates as YYYY-MM-DD)."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def ok(data: Any = None, status: int = 200, **extra):
    body = {"success": True}
    if data is not None:
        body["data"] = to_json(data)
    body.update(extra)
    return jsonify(body), status


def fail(message: str, status: int, **extra):
    return jsonify({"success": False, "message": message, **extra}), status


def payload() -> dict:
    """JSON body, or form fields for multipart posts."""
    return request.get_json(silent=True) or request.form.to_dict()


def parse_enum(enum_type: Type[E], value: Any, field_name: str) -> E:
    try:
        return enum_type(str(value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_type)
        raise ValidationError(f"{field_name} must be one of: {allowed}")


def optional_date(value: Optional[str]) -> Optional[date]:
    return parse_iso_date(value) if value else None


XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def xlsx_download(rows: list[dict], *, sheet_name: str, filename: str, columns=None):
    """Write rows to an in-memory workbook and send it as an attachment."""
    df = pd.DataFrame(rows, columns=columns)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)

    output.seek(0)
    return send_file(output, download_name=filename, as_attachment=True, mimetype=XLSX_MIMETYPE)


def current_principal() -> Principal:
    return Principal(
        email=session["email"],
        name=session.get("name", ""),
        role=Role(session["role"]),
        department=session.get("department", ""),
        section=session.get("section", ""),
    )


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "email" not in session:
            return fail("Please log in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def roles_required(*roles: Role):
    allowed = {r.value for r in roles}

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "email" not in session:
                return fail("Please log in to continue", 401)
            if session.get("role") not in allowed:
                return fail("You do not have permission for this action", 403)
            return view(*args, **kwargs)

        return wrapper

    return decorator


def register_error_handlers(app: Flask) -> None:
    """Each failure family gets its own status so clients can tell them apart."""

    @app.errorhandler(PasswordChangeRequired)
    def _password_change(e: PasswordChangeRequired):
        return fail(str(e), 403, must_set_password=True, email=e.email)

    @app.errorhandler(InvalidTransitionError)
    def _conflict(e):
        return fail(str(e), 409)

    @app.errorhandler(ValidationError)
    def _invalid(e):
        return fail(str(e), 400)

    @app.errorhandler(AuthenticationError)
    def _unauthenticated(e):
        return fail(str(e), 401)

    @app.errorhandler(AuthorizationError)
    def _forbidden(e):
        return fail(str(e), 403)

    @app.errorhandler(NotFoundError)
    def _not_found(e):
        return fail(str(e), 404)

    @app.errorhandler(RemoteStoreError)
    def _store_down(e):
        return fail(str(e), 503, retryable=True)

    @app.errorhandler(Exception)
    def _unexpected(e):
        if isinstance(e, HTTPException):
            return fail(e.description or e.name, e.code or 500)
        logger.exception("unhandled error on %s %s", request.method, request.path)
        if app.config.get("DEBUG"):
            return fail(f"Internal error: {e}", 500)
        return fail("Internal error", 500)
