from __future__ import annotations

import dataclasses
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.permissions import require_role, require_scope
from ..core.enums import AttendanceStatus, RequestStatus, Role
from ..core.exceptions import AuthorizationError, ConcurrencyAnomaly, NotFoundError, ValidationError
from ..events.model import Event
from ..events.repository import EventRepository
from ..requests.model import RequestFilter
from ..requests.repository import RequestRepository
from ..users.model import Principal, StudentFilter, User
from ..users.repository import UserRepository
from .model import (
    AttendanceRecord,
    AttendanceSummary,
    AttendanceView,
    BulkMarkResult,
    DayStatus,
    RecordFilter,
)
from .reconciliation import ReconciliationEngine
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        users: UserRepository,
        events: EventRepository,
        requests: RequestRepository,
    ):
        self._attendance = attendance
        self._users = users
        self._events = events
        self._requests = requests

    # -------- writes --------
    def mark_self(
        self,
        *,
        actor: Principal,
        on_date: date,
        status: AttendanceStatus,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """A student records (or changes) their own status for a day up to today."""

        require_role(actor, Role.STUDENT)
        now = now or now_local()
        if on_date > now.date():
            raise ValidationError("Attendance cannot be marked for a future date")

        student = self._users.get_by_email(actor.email)
        if not student:
            raise NotFoundError("Student account not found")

        record = self._new_record(student, on_date=on_date, status=status, marked_by=actor.email, now=now)
        self._attendance.upsert_record(record)
        return record

    def update_status(
        self,
        *,
        actor: Principal,
        student_email: str,
        on_date: date,
        status: AttendanceStatus,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Teacher correction of an existing record."""

        require_role(actor, Role.TEACHER, Role.ADMIN)

        existing = self._attendance.find_record(student_email, on_date)
        if not existing:
            raise NotFoundError("No attendance record for this student and date")
        require_scope(actor, department=existing.student_department, section=existing.student_section)

        updated = dataclasses.replace(existing, status=status, updated_at=now or now_local(), marked_by=actor.email)
        self._attendance.upsert_record(updated)
        logger.info("%s set %s on %s to %s", actor.email, student_email, on_date, status.value)
        return updated

    def bulk_mark(
        self,
        *,
        actor: Principal,
        status: AttendanceStatus,
        student_filter: Optional[StudentFilter] = None,
        on_date: Optional[date] = None,
        event_id: Optional[int] = None,
        event_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BulkMarkResult:
        """Fill the gaps for every matching student; existing records are left untouched.

        Each write is keyed by (student, day), so re-running, or running twice at once,
        cannot produce a second record.
        """

        require_role(actor, Role.TEACHER, Role.ADMIN)
        now = now or now_local()
        on_date = on_date or now.date()
        student_filter = self._scoped_filter(actor, student_filter or StudentFilter())
        event = self._find_event(event_id=event_id, event_name=event_name)

        created: list[str] = []
        skipped: list[str] = []
        for student in self._users.list_users(student_filter):
            record = self._new_record(
                student, on_date=on_date, status=status, marked_by=actor.email, now=now, event=event
            )
            if self._attendance.insert_if_absent(record):
                created.append(student.email)
            else:
                skipped.append(student.email)

        logger.info(
            "%s bulk-marked %s on %s: %s created, %s already recorded",
            actor.email,
            status.value,
            on_date,
            len(created),
            len(skipped),
        )
        return BulkMarkResult(on_date=on_date, created=tuple(created), skipped=tuple(skipped))

    def backfill_student_snapshot(self, *, actor: Principal, student_email: str) -> int:
        """Re-copy a student's current name/department/section onto their past records.

        Records otherwise keep the snapshot taken when they were written.
        """

        require_role(actor, Role.ADMIN)
        student = self._users.get_by_email(student_email)
        if not student:
            raise NotFoundError("Student account not found")

        changed = self._attendance.backfill_student_snapshot(
            student_email=student.email,
            name=student.name,
            department=student.department,
            section=student.section,
        )
        logger.info("%s backfilled %s attendance records for %s", actor.email, changed, student.email)
        return changed

    # -------- reads --------
    def list_enriched(self, *, actor: Principal, record_filter: Optional[RecordFilter] = None) -> list[AttendanceView]:
        record_filter = record_filter or RecordFilter()
        if actor.role == Role.STUDENT:
            record_filter = dataclasses.replace(record_filter, student_email=actor.email)
        elif actor.role == Role.TEACHER:
            record_filter = dataclasses.replace(
                record_filter,
                department=record_filter.department or actor.department or None,
                section=record_filter.section or actor.section or None,
            )

        records = [r for r in self._attendance.list_records(record_filter) if self._can_view(actor, r)]
        return self.reconciliation_engine().enrich(records)

    def reconciliation_engine(self) -> ReconciliationEngine:
        return ReconciliationEngine(
            self._events.list_events(),
            self._requests.list_requests(RequestFilter(status=RequestStatus.APPROVED, limit=None)),
        )

    @staticmethod
    def summary(views: Sequence[AttendanceView]) -> AttendanceSummary:
        total = len(views)
        present = sum(1 for v in views if v.record.status == AttendanceStatus.PRESENT)
        percentage = round(present * 100 / total) if total else 0
        return AttendanceSummary(total=total, present=present, absent=total - present, percentage=percentage)

    def week_view(self, *, actor: Principal, today: date) -> list[DayStatus]:
        """Monday..Sunday of the week containing ``today`` with the student's status per day."""

        require_role(actor, Role.STUDENT)
        monday = today - timedelta(days=today.weekday())
        sunday = monday + timedelta(days=6)

        records = self._attendance.list_records(
            RecordFilter(student_email=actor.email, start_date=monday, end_date=sunday)
        )
        by_day = {r.on_date: r.status for r in records}
        return [
            DayStatus(on_date=d, status=by_day.get(d), is_future=d > today)
            for d in (monday + timedelta(days=i) for i in range(7))
        ]

    def audit_duplicates(self, *, actor: Principal, on_date: Optional[date] = None) -> list[ConcurrencyAnomaly]:
        """Report (student, day) pairs holding more than one record. Nothing is merged."""

        require_role(actor, Role.TEACHER, Role.ADMIN)
        groups: dict[tuple[str, date], list[str]] = {}
        for r in self._attendance.list_records(RecordFilter(on_date=on_date)):
            groups.setdefault((r.student_email, r.on_date), []).append(r.record_id)

        anomalies = [
            ConcurrencyAnomaly(email, day, ids) for (email, day), ids in groups.items() if len(ids) > 1
        ]
        for anomaly in anomalies:
            logger.warning("duplicate attendance: %s", anomaly)
        return anomalies

    # -------- helpers --------
    @staticmethod
    def _new_record(
        student: User,
        *,
        on_date: date,
        status: AttendanceStatus,
        marked_by: str,
        now: datetime,
        event: Optional[Event] = None,
    ) -> AttendanceRecord:
        return AttendanceRecord(
            student_email=student.email,
            student_name=student.name,
            student_department=student.department,
            student_section=student.section,
            on_date=on_date,
            status=status,
            event_id=event.event_id if event else None,
            event_name=event.name if event else None,
            event_venue=event.venue if event else None,
            created_at=now,
            updated_at=now,
            marked_by=marked_by,
        )

    @staticmethod
    def _scoped_filter(actor: Principal, student_filter: StudentFilter) -> StudentFilter:
        """Teachers mark only their own department/section; admins mark anyone."""

        scoped = dataclasses.replace(student_filter, role=Role.STUDENT)
        if actor.role == Role.ADMIN:
            return scoped

        if actor.department and scoped.department and scoped.department != actor.department:
            raise AuthorizationError("This department is outside your scope")
        if actor.section and scoped.section and scoped.section != actor.section:
            raise AuthorizationError("This section is outside your scope")
        return dataclasses.replace(
            scoped,
            department=scoped.department or actor.department or None,
            section=scoped.section or actor.section or None,
        )

    def _find_event(self, *, event_id: Optional[int], event_name: Optional[str]) -> Optional[Event]:
        if event_id is not None:
            event = self._events.get_by_id(int(event_id))
        elif event_name:
            event = next((e for e in self._events.list_events() if e.name == event_name), None)
        else:
            return None

        if event is None:
            logger.warning(
                "bulk mark: event %s not found, marking without event", event_id if event_id is not None else event_name
            )
        return event

    @staticmethod
    def _can_view(actor: Principal, record: AttendanceRecord) -> bool:
        if actor.role == Role.ADMIN:
            return True
        if actor.role == Role.STUDENT:
            return record.student_email == actor.email
        return actor.scopes(record.student_department, record.student_section)
