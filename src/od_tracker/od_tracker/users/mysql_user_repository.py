from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import CredentialState, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import StudentFilter, User
from .repository import UserRepository

_COLUMNS = "email, name, role, department, section, year, credential_state, password_hash, created_at, updated_at"


def _to_user(r: dict) -> User:
    return User(
        email=r["email"],
        name=r["name"],
        role=Role(r["role"]),
        department=r.get("department") or "",
        section=r.get("section") or "",
        year=str(r.get("year") or ""),
        credential_state=CredentialState(r["credential_state"]),
        password_hash=r.get("password_hash") or "",
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s", (email.strip().lower(),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def list_users(self, user_filter: StudentFilter) -> Sequence[User]:
        clauses = ["1=1"]
        params: list[object] = []

        if user_filter.role is not None:
            clauses.append("role=%s")
            params.append(user_filter.role.value)
        if user_filter.department:
            clauses.append("department=%s")
            params.append(user_filter.department)
        if user_filter.section:
            clauses.append("section=%s")
            params.append(user_filter.section)
        if user_filter.year:
            clauses.append("year=%s")
            params.append(str(user_filter.year))

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE {where} ORDER BY name", tuple(params))
            return [_to_user(r) for r in fetchall(cur)]

    def upsert_user(self, user: User) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, name, role, department, section, year, credential_state, password_hash)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), role=VALUES(role), department=VALUES(department),
                    section=VALUES(section), year=VALUES(year),
                    credential_state=VALUES(credential_state), password_hash=VALUES(password_hash)
                """,
                (
                    user.email,
                    user.name,
                    user.role.value,
                    user.department,
                    user.section,
                    str(user.year),
                    user.credential_state.value,
                    user.password_hash,
                ),
            )

    def set_password(self, *, email: str, password_hash: str, credential_state: CredentialState) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET password_hash=%s, credential_state=%s WHERE email=%s",
                (password_hash, credential_state.value, email),
            )
            return cur.rowcount > 0

    def delete_by_email(self, email: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE email=%s", (email,))
            return cur.rowcount > 0
