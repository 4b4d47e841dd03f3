"""In-memory repositories shared by the service and HTTP tests."""
from __future__ import annotations

import dataclasses
from datetime import date, datetime
from typing import Optional

from werkzeug.security import generate_password_hash

from src.od_tracker.od_tracker.attendance.model import AttendanceRecord, RecordFilter
from src.od_tracker.od_tracker.container import wire
from src.od_tracker.od_tracker.core.enums import CredentialState, RequestStatus, Role
from src.od_tracker.od_tracker.events.model import Event
from src.od_tracker.od_tracker.requests.model import ODRequest, RequestFilter
from src.od_tracker.od_tracker.users.model import Principal, StudentFilter, User

CREATED_AT = datetime(2024, 3, 1, 9, 0, 0)


def make_user(
    email: str,
    *,
    name: Optional[str] = None,
    role: Role = Role.STUDENT,
    department: str = "CSE",
    section: str = "A",
    year: str = "3",
    password: str = "Secret123",
    credential_state: CredentialState = CredentialState.SET,
) -> User:
    return User(
        email=email,
        name=name or email.split("@")[0].title(),
        role=role,
        department=department,
        section=section,
        year=year,
        credential_state=credential_state,
        password_hash=generate_password_hash(password),
    )


def principal(user: User) -> Principal:
    return Principal.from_user(user)


ADMIN = Principal(email="admin@odzen.com", name="Admin", role=Role.ADMIN)
TEACHER = Principal(email="t@x.edu", name="Teacher", role=Role.TEACHER, department="CSE", section="A")


class InMemoryUsers:
    def __init__(self, *users: User):
        self._by_email: dict[str, User] = {u.email: u for u in users}

    def get_by_email(self, email: str) -> Optional[User]:
        return self._by_email.get(email)

    def list_users(self, user_filter: StudentFilter):
        return sorted((u for u in self._by_email.values() if user_filter.matches(u)), key=lambda u: u.name)

    def upsert_user(self, user: User) -> None:
        self._by_email[user.email] = user

    def set_password(self, *, email, password_hash, credential_state) -> bool:
        user = self._by_email.get(email)
        if not user:
            return False
        self._by_email[email] = dataclasses.replace(
            user, password_hash=password_hash, credential_state=credential_state
        )
        return True

    def delete_by_email(self, email: str) -> bool:
        return self._by_email.pop(email, None) is not None


class InMemoryEvents:
    def __init__(self, *events: Event):
        self._by_id: dict[int, Event] = {e.event_id: e for e in events}
        self._next_id = max(self._by_id, default=0) + 1

    def create_event(self, *, name, organizer, from_date, to_date, created_by, description=None, venue=None) -> int:
        event_id = self._next_id
        self._next_id += 1
        self._by_id[event_id] = Event(
            event_id=event_id,
            name=name,
            organizer=organizer,
            from_date=from_date,
            to_date=to_date,
            created_by=created_by,
            created_at=CREATED_AT,
            description=description,
            venue=venue,
        )
        return event_id

    def get_by_id(self, event_id: int) -> Optional[Event]:
        return self._by_id.get(event_id)

    def list_events(self):
        return sorted(self._by_id.values(), key=lambda e: e.created_at, reverse=True)

    def delete_event(self, event_id: int) -> bool:
        return self._by_id.pop(event_id, None) is not None


class InMemoryRequests:
    def __init__(self, *requests: ODRequest):
        self._by_id: dict[int, ODRequest] = {r.request_id: r for r in requests}
        self._next_id = max(self._by_id, default=0) + 1

    def create_request(self, request: ODRequest) -> int:
        request_id = self._next_id
        self._next_id += 1
        self._by_id[request_id] = dataclasses.replace(request, request_id=request_id)
        return request_id

    def get_request(self, request_id: int) -> Optional[ODRequest]:
        return self._by_id.get(request_id)

    def list_requests(self, request_filter: RequestFilter):
        f = request_filter
        out = [
            r
            for r in self._by_id.values()
            if (f.student_email is None or r.student_email == f.student_email)
            and (f.status is None or r.status == f.status)
            and (f.department is None or r.student_department == f.department)
            and (f.section is None or r.student_section == f.section)
        ]
        out.sort(key=lambda r: (r.created_at, r.request_id), reverse=True)
        return out[: f.limit]

    def set_status(self, *, request_id, status, actor_email, decided_at) -> bool:
        current = self._by_id.get(request_id)
        if not current or current.status != RequestStatus.PENDING:
            return False
        self._by_id[request_id] = dataclasses.replace(
            current, status=status, approved_by=actor_email, approved_at=decided_at
        )
        return True


class InMemoryAttendance:
    def __init__(self, *records: AttendanceRecord):
        self._by_id: dict[str, AttendanceRecord] = {r.record_id: r for r in records}

    def find_record(self, student_email: str, on_date: date) -> Optional[AttendanceRecord]:
        for r in self._by_id.values():
            if r.student_email == student_email and r.on_date == on_date:
                return r
        return None

    def upsert_record(self, record: AttendanceRecord) -> None:
        existing = self._by_id.get(record.record_id)
        if existing:
            record = dataclasses.replace(
                existing, status=record.status, updated_at=record.updated_at, marked_by=record.marked_by
            )
        self._by_id[record.record_id] = record

    def insert_if_absent(self, record: AttendanceRecord) -> bool:
        if record.record_id in self._by_id:
            return False
        self._by_id[record.record_id] = record
        return True

    def list_records(self, record_filter: RecordFilter):
        f = record_filter
        out = [
            r
            for r in self._by_id.values()
            if (f.on_date is None or r.on_date == f.on_date)
            and (f.start_date is None or r.on_date >= f.start_date)
            and (f.end_date is None or r.on_date <= f.end_date)
            and (f.student_email is None or r.student_email == f.student_email)
            and (f.department is None or r.student_department == f.department)
            and (f.section is None or r.student_section == f.section)
        ]
        out.sort(key=lambda r: r.student_name)
        out.sort(key=lambda r: r.on_date, reverse=True)
        return out

    def backfill_student_snapshot(self, *, student_email, name, department, section) -> int:
        changed = 0
        for key, r in list(self._by_id.items()):
            if r.student_email != student_email:
                continue
            if (r.student_name, r.student_department, r.student_section) == (name, department, section):
                continue
            self._by_id[key] = dataclasses.replace(
                r, student_name=name, student_department=department, student_section=section
            )
            changed += 1
        return changed

    def all(self) -> list[AttendanceRecord]:
        return list(self._by_id.values())


def make_event(event_id: int, name: str, *, venue: Optional[str] = None, created_by: str = "t@x.edu") -> Event:
    return Event(
        event_id=event_id,
        name=name,
        organizer="Dept",
        from_date=date(2024, 3, 1),
        to_date=date(2024, 3, 31),
        created_by=created_by,
        created_at=CREATED_AT,
        venue=venue,
    )


def make_request(
    request_id: int,
    student: User,
    *,
    from_date: date,
    to_date: date,
    status: RequestStatus = RequestStatus.APPROVED,
    event_id: Optional[int] = None,
    event_name: str = "Hackathon",
    created_at: datetime = CREATED_AT,
) -> ODRequest:
    return ODRequest(
        request_id=request_id,
        student_email=student.email,
        student_name=student.name,
        student_department=student.department,
        student_section=student.section,
        event_id=event_id,
        event_name=event_name,
        from_date=from_date,
        to_date=to_date,
        status=status,
        created_at=created_at,
    )


def make_record(student: User, on_date: date, status, **kwargs) -> AttendanceRecord:
    return AttendanceRecord(
        student_email=student.email,
        student_name=student.name,
        student_department=student.department,
        student_section=student.section,
        on_date=on_date,
        status=status,
        created_at=CREATED_AT,
        updated_at=CREATED_AT,
        marked_by=kwargs.pop("marked_by", student.email),
        **kwargs,
    )


def make_container(*, users=(), events=(), requests=(), records=()):
    return wire(
        users_repo=InMemoryUsers(*users),
        events_repo=InMemoryEvents(*events),
        requests_repo=InMemoryRequests(*requests),
        attendance_repo=InMemoryAttendance(*records),
    )
