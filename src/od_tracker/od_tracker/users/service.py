from __future__ import annotations

import logging
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.permissions import require_role
from ..common.validators import require_email, require_non_empty, require_strong_password
from ..core.enums import CredentialState, Role
from ..core.exceptions import (
    AuthenticationError,
    NotFoundError,
    PasswordChangeRequired,
    ValidationError,
)
from .model import Principal, StudentFilter, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
        return False


class AuthService:
    """Use case: authenticate user (login) and first-time password setup."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> Principal:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not password or not _password_matches(user.password_hash, password):
            raise AuthenticationError("Invalid email or password")

        if user.credential_state == CredentialState.TEMPORARY:
            raise PasswordChangeRequired(user.email)

        return Principal.from_user(user)

    def set_initial_password(self, *, email: str, temp_password: str, new_password: str) -> Principal:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not _password_matches(user.password_hash, temp_password or ""):
            raise AuthenticationError("Invalid email or temporary password")
        if user.credential_state == CredentialState.SET:
            raise ValidationError("Password has already been set for this account")

        require_strong_password(new_password)
        if new_password == temp_password:
            raise ValidationError("New password must differ from the temporary password")

        if not self._users.set_password(
            email=user.email,
            password_hash=generate_password_hash(new_password),
            credential_state=CredentialState.SET,
        ):
            raise NotFoundError("Account no longer exists")

        logger.info("password set for %s", user.email)
        return Principal.from_user(user)


class UserService:
    """Use case: manage directory accounts (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def create_account(
        self,
        *,
        actor: Principal,
        name: str,
        email: str,
        role: Role,
        department: str,
        section: str,
        year: str,
        temp_password: str,
    ) -> User:
        require_role(actor, Role.ADMIN)

        if role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be created here")

        user = User(
            email=require_email(email),
            name=require_non_empty(name, "Name"),
            role=role,
            department=require_non_empty(department, "Department"),
            section=require_non_empty(section, "Section"),
            year=require_non_empty(year, "Year"),
            credential_state=CredentialState.TEMPORARY,
            password_hash=generate_password_hash(require_non_empty(temp_password, "Password")),
        )
        existing = self._users.get_by_email(user.email)
        if existing and existing.role == Role.ADMIN:
            raise ValidationError("An admin account already uses this email")

        self._users.upsert_user(user)
        logger.info("%s provisioned %s account %s", actor.email, role.value, user.email)
        return user

    def list_users(self, *, actor: Principal, user_filter: StudentFilter) -> Sequence[User]:
        require_role(actor, Role.ADMIN, Role.TEACHER)
        users = self._users.list_users(user_filter)
        if actor.role == Role.TEACHER:
            users = [u for u in users if u.role == Role.STUDENT and actor.scopes(u.department, u.section)]
        return users

    def delete_user(self, *, actor: Principal, email: str) -> None:
        require_role(actor, Role.ADMIN)

        user = self._users.get_by_email((email or "").strip().lower())
        if not user:
            raise NotFoundError("User does not exist")
        if user.role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be deleted")

        if not self._users.delete_by_email(user.email):
            raise NotFoundError("User does not exist")
        logger.info("%s deleted account %s", actor.email, user.email)
