"""Bulk roster provisioning from spreadsheet rows.

Rows arrive as ``{header: cell}`` dicts from the spreadsheet codec. Headers are
normalized and mapped through ``HEADER_ALIASES`` before any ``User`` is built,
so a sheet using ``dept`` or ``mail`` imports the same as one using the
canonical names.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from werkzeug.security import generate_password_hash

from ..common.permissions import require_role
from ..common.validators import require_email
from ..core.enums import CredentialState, Role
from ..core.exceptions import ValidationError
from .model import Principal, User
from .repository import UserRepository

logger = logging.getLogger(__name__)

HEADER_ALIASES: dict[str, tuple[str, ...]] = {
    "name": ("name", "student_name", "teacher_name"),
    "email": ("email", "mail", "email_id"),
    "department": ("department", "dept"),
    "section": ("section", "sec"),
    "year": ("year", "yr"),
    "password": ("password", "pwd", "pass"),
    "password_set": ("password_set", "password_sett", "pwd_set"),
}

REQUIRED_FIELDS = ("name", "email", "department", "section", "year", "password")

TEMPLATE_HEADERS = ("Name", "Email", "Department", "Section", "Year", "Password", "Password_Set")

_TEMPLATE_SAMPLES = {
    Role.STUDENT: (
        ("John Doe", "john.doe@student.edu", "CSE", "A", "2", "temp123", "FALSE"),
        ("Jane Smith", "jane.smith@student.edu", "ECE", "B", "3", "temp456", "FALSE"),
    ),
    Role.TEACHER: (
        ("Dr. Robert Davis", "robert.davis@faculty.edu", "CSE", "A", "N/A", "teach123", "FALSE"),
        ("Prof. Sarah Miller", "sarah.miller@faculty.edu", "ECE", "B", "N/A", "teach456", "FALSE"),
    ),
}

_ALIAS_TO_FIELD = {alias: canonical for canonical, aliases in HEADER_ALIASES.items() for alias in aliases}


def normalize_header(value: Any) -> str:
    return re.sub(r"\s+", "_", str(value or "").strip().lower())


def canonical_row(row: Mapping[Any, Any]) -> dict[str, Any]:
    """Map one raw row onto canonical field names. Unknown columns are dropped.

    When several aliases of the same field are present, the first non-empty one wins.
    """
    out: dict[str, Any] = {}
    for header, value in row.items():
        canonical = _ALIAS_TO_FIELD.get(normalize_header(header))
        if canonical is None or _is_blank(value):
            continue
        out.setdefault(canonical, value)
    return out


def missing_required_headers(headers: Iterable[Any]) -> list[str]:
    present = {_ALIAS_TO_FIELD.get(normalize_header(h)) for h in headers}
    return [f for f in REQUIRED_FIELDS if f not in present]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    # pandas hands empty cells over as NaN
    if isinstance(value, float) and value != value:
        return True
    return str(value).strip() == ""


def _as_text(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def _as_flag(value: Any) -> bool:
    return value is True or str(value).strip().lower() == "true"


@dataclass
class ImportResult:
    created: int = 0
    errors: list[tuple[int, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.created > 0


class RosterImporter:
    """Use case: admin bulk-provisions students or teachers."""

    def __init__(self, users: UserRepository):
        self._users = users

    def build_user(self, row: Mapping[Any, Any], *, role: Role, row_number: Optional[int] = None) -> User:
        data = canonical_row(row)
        missing = [f for f in REQUIRED_FIELDS if f not in data]
        if missing:
            where = f" in row {row_number}" if row_number else ""
            raise ValidationError(f"Missing required fields{where}: {', '.join(missing)}")

        state = CredentialState.SET if _as_flag(data.get("password_set", False)) else CredentialState.TEMPORARY
        return User(
            email=require_email(_as_text(data["email"])),
            name=_as_text(data["name"]),
            role=role,
            department=_as_text(data["department"]),
            section=_as_text(data["section"]),
            year=_as_text(data["year"]),
            credential_state=state,
            password_hash=generate_password_hash(_as_text(data["password"])),
        )

    def import_rows(self, *, actor: Principal, rows: Iterable[Mapping[Any, Any]], role: Role) -> ImportResult:
        require_role(actor, Role.ADMIN)
        if role not in (Role.STUDENT, Role.TEACHER):
            raise ValidationError("Only student and teacher rosters can be imported")

        result = ImportResult()
        # Row 1 is the header line of the sheet.
        for row_number, row in enumerate(rows, start=2):
            try:
                user = self.build_user(row, role=role, row_number=row_number)
                existing = self._users.get_by_email(user.email)
                if existing and existing.role == Role.ADMIN:
                    raise ValidationError(f"Row {row_number}: an admin account already uses {user.email}")
                self._users.upsert_user(user)
            except ValidationError as e:
                logger.warning("roster row %s rejected: %s", row_number, e)
                result.errors.append((row_number, str(e)))
                continue
            result.created += 1

        logger.info(
            "%s imported %s %s accounts (%s rejected)", actor.email, result.created, role.value, len(result.errors)
        )
        return result


def template_rows(role: Role) -> list[dict[str, str]]:
    """Sample sheet content an admin can fill in and upload back."""
    return [dict(zip(TEMPLATE_HEADERS, sample)) for sample in _TEMPLATE_SAMPLES.get(role, ())]
