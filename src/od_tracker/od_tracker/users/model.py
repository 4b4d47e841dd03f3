from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import CredentialState, Role


@dataclass(frozen=True)
class User:
    """Domain entity: directory entry keyed by email.

    Note: Plain data object (no DB access code here).
    """

    email: str
    name: str
    role: Role
    department: str
    section: str
    year: str
    credential_state: CredentialState
    password_hash: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Principal:
    """The authenticated caller, passed explicitly into every service operation."""

    email: str
    name: str
    role: Role
    department: str = ""
    section: str = ""

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            email=user.email,
            name=user.name,
            role=user.role,
            department=user.department,
            section=user.section,
        )

    def scopes(self, department: str, section: str) -> bool:
        """True when a teacher's own department/section covers the given student.

        An empty department or section on the teacher does not restrict.
        """
        if self.department and self.department != department:
            return False
        if self.section and self.section != section:
            return False
        return True


@dataclass(frozen=True)
class StudentFilter:
    """AND-composed roster filter; None means "any"."""

    role: Optional[Role] = Role.STUDENT
    department: Optional[str] = None
    section: Optional[str] = None
    year: Optional[str] = None

    def matches(self, user: User) -> bool:
        if self.role is not None and user.role != self.role:
            return False
        if self.department and user.department != self.department:
            return False
        if self.section and user.section != self.section:
            return False
        if self.year and str(user.year) != str(self.year):
            return False
        return True
