from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import CredentialState
from .model import StudentFilter, User


class UserRepository(Protocol):
    """Directory store interface.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def list_users(self, user_filter: StudentFilter) -> Sequence[User]:
        raise NotImplementedError

    def upsert_user(self, user: User) -> None:
        """Create the account or overwrite it (email is the key)."""

        raise NotImplementedError

    def set_password(self, *, email: str, password_hash: str, credential_state: CredentialState) -> bool:
        raise NotImplementedError

    def delete_by_email(self, email: str) -> bool:
        raise NotImplementedError
