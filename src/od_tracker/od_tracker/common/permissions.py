from __future__ import annotations

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..users.model import Principal


def require_role(actor: Principal, *roles: Role) -> None:
    if actor is None or actor.role not in roles:
        raise AuthorizationError("You do not have permission for this action")


def require_scope(actor: Principal, *, department: str, section: str) -> None:
    """Teachers act only on students of their own department/section. Admins act on everyone."""

    if actor.role == Role.ADMIN:
        return
    if actor.role != Role.TEACHER or not actor.scopes(department, section):
        raise AuthorizationError("This student is outside your department/section")
