from __future__ import annotations

import re
from datetime import date

from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def require_non_empty(value, field_name: str) -> str:
    text = "" if value is None else str(value)
    if not text.strip():
        raise ValidationError(f"{field_name} is required")
    return text.strip()


def require_email(value, field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name).lower()
    if not _EMAIL_RE.match(email):
        raise ValidationError(f"Invalid email format: {email}")
    return email


def require_date_range(start: date, end: date) -> None:
    if start is None or end is None:
        raise ValidationError("From and To dates are required")
    if end < start:
        raise ValidationError("From date must be on or before To date")


def require_strong_password(value: str) -> str:
    if not value:
        raise ValidationError("Password is required")
    if len(value) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if not re.search(r"[A-Z]", value):
        raise ValidationError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", value):
        raise ValidationError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", value):
        raise ValidationError("Password must contain at least one number")
    return value
