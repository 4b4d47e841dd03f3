from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RequestStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Attachment, ODRequest, RequestFilter
from .repository import RequestRepository

_COLUMNS = """
    request_id, student_email, student_name, student_department, student_section,
    event_id, event_name, from_date, to_date,
    attachment_b64, attachment_type, attachment_name,
    status, created_at, approved_by, approved_at
"""


def _to_request(r: dict) -> ODRequest:
    attachment = None
    if r.get("attachment_b64"):
        attachment = Attachment(
            content_b64=r["attachment_b64"],
            mime_type=r.get("attachment_type") or "",
            filename=r.get("attachment_name") or "",
        )

    return ODRequest(
        request_id=int(r["request_id"]),
        student_email=r["student_email"],
        student_name=r["student_name"],
        student_department=r.get("student_department") or "",
        student_section=r.get("student_section") or "",
        event_id=int(r["event_id"]) if r.get("event_id") is not None else None,
        event_name=r.get("event_name") or "",
        from_date=normalize_mysql_date(r["from_date"]),
        to_date=normalize_mysql_date(r["to_date"]),
        status=RequestStatus(r["status"]),
        created_at=r["created_at"],
        attachment=attachment,
        approved_by=r.get("approved_by"),
        approved_at=r.get("approved_at"),
    )


class MySQLRequestRepository(RequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create_request(self, request: ODRequest) -> int:
        att = request.attachment
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO od_requests(
                    student_email, student_name, student_department, student_section,
                    event_id, event_name, from_date, to_date,
                    attachment_b64, attachment_type, attachment_name,
                    status, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    request.student_email,
                    request.student_name,
                    request.student_department,
                    request.student_section,
                    request.event_id,
                    request.event_name,
                    request.from_date,
                    request.to_date,
                    att.content_b64 if att else None,
                    att.mime_type if att else None,
                    att.filename if att else None,
                    RequestStatus.PENDING.value,
                    request.created_at,
                ),
            )
            return int(cur.lastrowid)

    def get_request(self, request_id: int) -> Optional[ODRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM od_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _to_request(r) if r else None

    def list_requests(self, request_filter: RequestFilter) -> Sequence[ODRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if request_filter.student_email:
            clauses.append("student_email=%s")
            params.append(request_filter.student_email)
        if request_filter.status is not None:
            clauses.append("status=%s")
            params.append(request_filter.status.value)
        if request_filter.department:
            clauses.append("student_department=%s")
            params.append(request_filter.department)
        if request_filter.section:
            clauses.append("student_section=%s")
            params.append(request_filter.section)

        where = " AND ".join(clauses)
        limit = ""
        if request_filter.limit is not None:
            limit = "LIMIT %s"
            params.append(int(request_filter.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM od_requests
                WHERE {where}
                ORDER BY created_at DESC, request_id DESC
                {limit}
                """,
                tuple(params),
            )
            return [_to_request(r) for r in fetchall(cur)]

    def set_status(
        self,
        *,
        request_id: int,
        status: RequestStatus,
        actor_email: str,
        decided_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE od_requests
                SET status=%s, approved_by=%s, approved_at=%s
                WHERE request_id=%s AND status=%s
                """,
                (
                    status.value,
                    actor_email,
                    decided_at,
                    int(request_id),
                    RequestStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0
