from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account roles used for authorization."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"


class CredentialState(str, Enum):
    """Whether the account still logs in with its provisioned temporary password."""

    TEMPORARY = "temporary"
    SET = "set"


class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"


class RequestStatus(str, Enum):
    """OD request lifecycle states."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not RequestStatus.PENDING
