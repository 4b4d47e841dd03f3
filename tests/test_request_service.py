from __future__ import annotations

from datetime import date, datetime

import pytest

from src.od_tracker.od_tracker.core.enums import RequestStatus
from src.od_tracker.od_tracker.core.exceptions import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)

from tests.fakes import ADMIN, TEACHER, make_container, make_event, make_request, make_user, principal

NOW = datetime(2024, 3, 5, 10, 0, 0)

S1 = make_user("s1@x.edu", name="Asha")
S2 = make_user("s2@x.edu", name="Bala")
FAR = make_user("f1@x.edu", name="Farah", department="MECH", section="C")


def test_student_creates_pending_request_with_event_snapshot():
    c = make_container(users=[S1], events=[make_event(4, "Hackathon")])

    rid = c.request_service.create_request(
        actor=principal(S1), event_id=4, from_date=date(2024, 3, 9), to_date=date(2024, 3, 10), now=NOW
    )

    stored = c.requests_repo.get_request(rid)
    assert stored.status == RequestStatus.PENDING
    assert (stored.event_id, stored.event_name) == (4, "Hackathon")
    assert (stored.student_department, stored.student_section) == ("CSE", "A")


def test_request_for_unknown_event_keeps_placeholder_name():
    c = make_container(users=[S1])

    rid = c.request_service.create_request(
        actor=principal(S1), event_id=99, from_date=date(2024, 3, 9), to_date=date(2024, 3, 9), now=NOW
    )

    assert c.requests_repo.get_request(rid).event_name == "Unknown Event"


def test_inverted_dates_are_rejected():
    c = make_container(users=[S1])
    with pytest.raises(ValidationError):
        c.request_service.create_request(
            actor=principal(S1), event_id=None, from_date=date(2024, 3, 12), to_date=date(2024, 3, 10)
        )


def test_teacher_cannot_submit_request():
    c = make_container(users=[S1])
    with pytest.raises(AuthorizationError):
        c.request_service.create_request(
            actor=TEACHER, event_id=None, from_date=date(2024, 3, 9), to_date=date(2024, 3, 9)
        )


def test_teacher_approves_once_then_conflicts():
    c = make_container(
        users=[S1],
        requests=[
            make_request(1, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 10), status=RequestStatus.PENDING)
        ],
    )

    decided = c.request_service.approve(actor=TEACHER, request_id=1, now=NOW)
    assert decided.status == RequestStatus.APPROVED
    assert c.requests_repo.get_request(1).approved_by == TEACHER.email

    with pytest.raises(InvalidTransitionError):
        c.request_service.reject(actor=TEACHER, request_id=1, now=NOW)


def test_lost_race_surfaces_as_conflict():
    c = make_container(
        users=[S1],
        requests=[
            make_request(1, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 10), status=RequestStatus.PENDING)
        ],
    )
    # another teacher wins between our read and write
    c.requests_repo.set_status = lambda **kwargs: False

    with pytest.raises(InvalidTransitionError):
        c.request_service.approve(actor=TEACHER, request_id=1, now=NOW)


def test_out_of_scope_or_missing_requests_cannot_be_decided():
    c = make_container(
        users=[FAR],
        requests=[
            make_request(1, FAR, from_date=date(2024, 3, 9), to_date=date(2024, 3, 9), status=RequestStatus.PENDING)
        ],
    )
    with pytest.raises(AuthorizationError):
        c.request_service.approve(actor=TEACHER, request_id=1, now=NOW)
    with pytest.raises(NotFoundError):
        c.request_service.approve(actor=TEACHER, request_id=2, now=NOW)
    with pytest.raises(AuthorizationError):
        c.request_service.approve(actor=principal(FAR), request_id=1, now=NOW)


def test_students_see_only_their_own_requests():
    c = make_container(
        users=[S1, S2],
        requests=[
            make_request(1, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 9)),
            make_request(2, S2, from_date=date(2024, 3, 9), to_date=date(2024, 3, 9)),
        ],
    )

    mine = c.request_service.list_mine(actor=principal(S1))

    assert [r.request_id for r in mine] == [1]
    with pytest.raises(AuthorizationError):
        c.request_service.get_request(actor=principal(S1), request_id=2)


def test_active_roster_on_boundary_day():
    c = make_container(
        users=[S1, S2, FAR],
        requests=[
            make_request(1, S1, from_date=date(2024, 3, 8), to_date=date(2024, 3, 10)),
            make_request(2, S2, from_date=date(2024, 3, 1), to_date=date(2024, 3, 9)),
            make_request(3, FAR, from_date=date(2024, 3, 8), to_date=date(2024, 3, 10)),
        ],
    )

    on_od = c.request_service.active_roster(actor=TEACHER, today=date(2024, 3, 10))
    assert [(s.email, r.request_id) for s, r in on_od] == [("s1@x.edu", 1)]

    everyone = c.request_service.active_roster(actor=ADMIN, today=date(2024, 3, 10))
    assert {s.email for s, _ in everyone} == {"s1@x.edu", "f1@x.edu"}

    after = c.request_service.active_roster(actor=TEACHER, today=date(2024, 3, 11))
    assert after == []
