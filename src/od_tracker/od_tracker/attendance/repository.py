from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, RecordFilter


class AttendanceRepository(Protocol):
    def find_record(self, student_email: str, on_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def upsert_record(self, record: AttendanceRecord) -> None:
        """Write under the record key; an existing record keeps created_at and event fields
        and takes the new status, updated_at and marked_by."""

        raise NotImplementedError

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        """Atomic gap-fill. True if written, False if a record for that key already existed."""

        raise NotImplementedError

    def list_records(self, record_filter: RecordFilter) -> Sequence[AttendanceRecord]:
        """Ordered by date DESC, then student name."""

        raise NotImplementedError

    def backfill_student_snapshot(self, *, student_email: str, name: str, department: str, section: str) -> int:
        """Re-copy the directory fields onto every record of one student. Returns rows changed."""

        raise NotImplementedError
