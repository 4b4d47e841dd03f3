from __future__ import annotations

from datetime import date, datetime

import mysql.connector
import pytest
from mysql.connector import errorcode

from src.od_tracker.od_tracker.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.od_tracker.od_tracker.core.enums import AttendanceStatus, RequestStatus
from src.od_tracker.od_tracker.core.exceptions import RemoteStoreError
from src.od_tracker.od_tracker.requests.mysql_request_repository import MySQLRequestRepository

from tests.fakes import make_record, make_user


class StubCursor:
    def __init__(self, *, error=None, rowcount=1):
        self._error = error
        self.rowcount = rowcount
        self.executed: list[tuple[str, tuple]] = []
        self.closed = False

    def execute(self, sql, params=()):
        self.executed.append((sql, params))
        if self._error is not None:
            raise self._error

    def close(self):
        self.closed = True


class StubConnection:
    def __init__(self, cursor: StubCursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class StubConnFactory:
    def __init__(self, cursor: StubCursor):
        self.connection = StubConnection(cursor)

    def connect(self):
        return self.connection


RECORD = make_record(make_user("s1@x.edu"), date(2024, 3, 10), AttendanceStatus.PRESENT)


def test_insert_if_absent_writes_new_record():
    factory = StubConnFactory(StubCursor())

    assert MySQLAttendanceRepository(factory).insert_if_absent(RECORD) is True
    assert factory.connection.committed


def test_duplicate_key_means_already_present():
    dup = mysql.connector.IntegrityError(msg="Duplicate entry", errno=errorcode.ER_DUP_ENTRY)
    cursor = StubCursor(error=dup)
    factory = StubConnFactory(cursor)

    assert MySQLAttendanceRepository(factory).insert_if_absent(RECORD) is False
    assert factory.connection.committed
    assert not factory.connection.rolled_back
    assert cursor.executed[0][1][0] == "s1@x.edu_2024-03-10"


def test_other_integrity_errors_surface_as_store_errors():
    fk = mysql.connector.IntegrityError(msg="Cannot add row", errno=errorcode.ER_NO_REFERENCED_ROW_2)
    factory = StubConnFactory(StubCursor(error=fk))

    with pytest.raises(RemoteStoreError) as exc:
        MySQLAttendanceRepository(factory).insert_if_absent(RECORD)

    assert exc.value.retryable
    assert factory.connection.rolled_back
    assert factory.connection.closed


def test_set_status_only_touches_pending_rows():
    cursor = StubCursor(rowcount=1)

    changed = MySQLRequestRepository(StubConnFactory(cursor)).set_status(
        request_id=7,
        status=RequestStatus.APPROVED,
        actor_email="t@x.edu",
        decided_at=datetime(2024, 3, 5, 10, 0),
    )

    sql, params = cursor.executed[0]
    assert changed is True
    assert "status=%s" in sql.split("WHERE", 1)[1]
    assert params[-2:] == (7, "pending")


def test_set_status_reports_lost_race():
    changed = MySQLRequestRepository(StubConnFactory(StubCursor(rowcount=0))).set_status(
        request_id=7,
        status=RequestStatus.REJECTED,
        actor_email="t@x.edu",
        decided_at=datetime(2024, 3, 5, 10, 0),
    )

    assert changed is False
