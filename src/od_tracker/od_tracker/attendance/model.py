from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from ..core.enums import AttendanceStatus


def attendance_key(student_email: str, on_date: date) -> str:
    """Deterministic record id: one record per student per day."""
    return f"{student_email.strip().lower()}_{on_date.isoformat()}"


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: a student's presence on one calendar day.

    Student and event fields are snapshots taken when the record was written.
    """

    student_email: str
    student_name: str
    student_department: str
    student_section: str
    on_date: date
    status: AttendanceStatus
    created_at: datetime
    updated_at: datetime
    marked_by: str
    event_id: Optional[int] = None
    event_name: Optional[str] = None
    event_venue: Optional[str] = None
    record_id: str = ""

    def __post_init__(self):
        if not self.record_id:
            object.__setattr__(self, "record_id", attendance_key(self.student_email, self.on_date))


@dataclass(frozen=True)
class RecordFilter:
    on_date: Optional[date] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    student_email: Optional[str] = None
    department: Optional[str] = None
    section: Optional[str] = None


class LabelSource(str, Enum):
    RECORD_EVENT = "record_event"
    OD_REQUEST = "od_request"
    RECORD_SNAPSHOT = "record_snapshot"
    REGULAR_CLASS = "regular_class"


@dataclass(frozen=True)
class EventLabel:
    name: str
    venue: str
    source: LabelSource


@dataclass(frozen=True)
class AttendanceView:
    """Read-model for display: a record with its reconciled event label."""

    record: AttendanceRecord
    label: EventLabel

    @property
    def event_name(self) -> str:
        return self.label.name

    @property
    def event_venue(self) -> str:
        return self.label.venue


@dataclass(frozen=True)
class AttendanceSummary:
    total: int
    present: int
    absent: int
    percentage: int


@dataclass(frozen=True)
class DayStatus:
    on_date: date
    status: Optional[AttendanceStatus]
    is_future: bool


@dataclass(frozen=True)
class BulkMarkResult:
    on_date: date
    created: tuple[str, ...]
    skipped: tuple[str, ...]
