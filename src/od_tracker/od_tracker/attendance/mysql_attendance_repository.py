from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import AttendanceRecord, RecordFilter
from .repository import AttendanceRepository

_COLUMNS = """
    record_id, student_email, student_name, student_department, student_section,
    att_date, status, event_id, event_name, event_venue, created_at, updated_at, marked_by
"""

_INSERT = """
    INSERT INTO attendance_records(
        record_id, student_email, student_name, student_department, student_section,
        att_date, status, event_id, event_name, event_venue, created_at, updated_at, marked_by
    )
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=r["record_id"],
        student_email=r["student_email"],
        student_name=r["student_name"],
        student_department=r.get("student_department") or "",
        student_section=r.get("student_section") or "",
        on_date=normalize_mysql_date(r["att_date"]),
        status=AttendanceStatus(r["status"]),
        event_id=int(r["event_id"]) if r.get("event_id") is not None else None,
        event_name=r.get("event_name"),
        event_venue=r.get("event_venue"),
        created_at=r["created_at"],
        updated_at=r["updated_at"],
        marked_by=r["marked_by"],
    )


def _params(record: AttendanceRecord) -> tuple:
    return (
        record.record_id,
        record.student_email,
        record.student_name,
        record.student_department,
        record.student_section,
        record.on_date,
        record.status.value,
        record.event_id,
        record.event_name,
        record.event_venue,
        record.created_at,
        record.updated_at,
        record.marked_by,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_record(self, student_email: str, on_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE student_email=%s AND att_date=%s",
                (student_email, on_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_record(self, record: AttendanceRecord) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _INSERT
                + """
                ON DUPLICATE KEY UPDATE
                    status=VALUES(status), updated_at=VALUES(updated_at), marked_by=VALUES(marked_by)
                """,
                _params(record),
            )

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            try:
                cur.execute(_INSERT, _params(record))
            except mysql.connector.IntegrityError as e:
                if e.errno != errorcode.ER_DUP_ENTRY:
                    raise
                return False
            return True

    def list_records(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        clauses = ["1=1"]
        params: list[object] = []

        if record_filter.on_date is not None:
            clauses.append("att_date=%s")
            params.append(record_filter.on_date)
        if record_filter.start_date is not None:
            clauses.append("att_date>=%s")
            params.append(record_filter.start_date)
        if record_filter.end_date is not None:
            clauses.append("att_date<=%s")
            params.append(record_filter.end_date)
        if record_filter.student_email:
            clauses.append("student_email=%s")
            params.append(record_filter.student_email)
        if record_filter.department:
            clauses.append("student_department=%s")
            params.append(record_filter.department)
        if record_filter.section:
            clauses.append("student_section=%s")
            params.append(record_filter.section)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY att_date DESC, student_name ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def backfill_student_snapshot(self, *, student_email: str, name: str, department: str, section: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET student_name=%s, student_department=%s, student_section=%s
                WHERE student_email=%s
                """,
                (name, department, section, student_email),
            )
            return int(cur.rowcount)
