from __future__ import annotations

from datetime import date

from src.od_tracker.od_tracker.core.enums import RequestStatus
from src.od_tracker.od_tracker.requests.eligibility import active_od_roster, current_od, is_active_od, is_current

from tests.fakes import make_request, make_user

S1 = make_user("s1@x.edu", name="Asha")
S2 = make_user("s2@x.edu", name="Bala")


def test_approved_request_is_current_through_its_last_day():
    req = make_request(1, S1, from_date=date(2024, 3, 8), to_date=date(2024, 3, 10))

    assert is_current(req, date(2024, 3, 10))
    assert not is_current(req, date(2024, 3, 11))


def test_pending_request_is_current_regardless_of_dates():
    req = make_request(
        1, S1, from_date=date(2024, 1, 1), to_date=date(2024, 1, 2), status=RequestStatus.PENDING
    )
    assert is_current(req, date(2024, 3, 10))


def test_rejected_request_is_never_current():
    req = make_request(
        1, S1, from_date=date(2024, 3, 1), to_date=date(2024, 3, 31), status=RequestStatus.REJECTED
    )
    assert not is_active_od([req], date(2024, 3, 10))


def test_current_od_filters_by_event_name():
    hack = make_request(1, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 12), event_name="Hackathon")
    symp = make_request(2, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 12), event_name="Symposium")

    assert current_od([hack, symp], date(2024, 3, 10), event_name="Symposium") is symp
    assert current_od([hack], date(2024, 3, 10), event_name="Symposium") is None


def test_roster_pairs_each_student_with_the_request_that_makes_them_current():
    ended = make_request(1, S2, from_date=date(2024, 3, 1), to_date=date(2024, 3, 9))
    live = make_request(2, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 10))

    roster = active_od_roster([S1, S2], [ended, live], date(2024, 3, 10))

    assert roster == [(S1, live)]
