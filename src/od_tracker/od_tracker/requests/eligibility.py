from __future__ import annotations

from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.enums import RequestStatus
from ..users.model import User
from .model import ODRequest


def is_current(request: ODRequest, today: date) -> bool:
    """Pending, or approved and not yet over (to_date inclusive)."""
    if request.status == RequestStatus.PENDING:
        return True
    return request.status == RequestStatus.APPROVED and request.to_date >= today


def is_active_od(requests: Iterable[ODRequest], today: date) -> bool:
    return any(is_current(r, today) for r in requests)


def current_od(
    requests: Iterable[ODRequest],
    today: date,
    *,
    event_name: Optional[str] = None,
) -> Optional[ODRequest]:
    for r in requests:
        if event_name and r.event_name != event_name:
            continue
        if is_current(r, today):
            return r
    return None


def active_od_roster(
    students: Sequence[User],
    requests: Sequence[ODRequest],
    today: date,
    *,
    event_name: Optional[str] = None,
) -> list[tuple[User, ODRequest]]:
    """Students currently on OD, each paired with the request that makes them so.

    With ``event_name`` only requests for that event count.
    """
    by_student: dict[str, list[ODRequest]] = {}
    for r in requests:
        by_student.setdefault(r.student_email, []).append(r)

    out: list[tuple[User, ODRequest]] = []
    for student in students:
        current = current_od(by_student.get(student.email, ()), today, event_name=event_name)
        if current is not None:
            out.append((student, current))
    return out
