from __future__ import annotations

from datetime import date, datetime

from src.od_tracker.od_tracker.attendance.model import LabelSource
from src.od_tracker.od_tracker.attendance.reconciliation import REGULAR_CLASS, ReconciliationEngine
from src.od_tracker.od_tracker.core.enums import AttendanceStatus, RequestStatus

from tests.fakes import make_event, make_record, make_request, make_user

S1 = make_user("s1@x.edu")
DAY = date(2024, 3, 10)


def test_record_event_takes_precedence_over_od_request():
    events = [make_event(1, "Symposium", venue="Main Hall"), make_event(2, "Hackathon")]
    requests = [make_request(1, S1, from_date=DAY, to_date=DAY, event_id=2)]
    record = make_record(S1, DAY, AttendanceStatus.PRESENT, event_id=1, event_name="Symposium")

    label = ReconciliationEngine(events, requests).resolve(record)

    assert (label.name, label.venue, label.source) == ("Symposium", "Main Hall", LabelSource.RECORD_EVENT)


def test_approved_od_covering_the_day_labels_a_plain_record():
    events = [make_event(2, "Hackathon", venue="Lab 3")]
    requests = [make_request(1, S1, from_date=date(2024, 3, 9), to_date=date(2024, 3, 11), event_id=2)]
    record = make_record(S1, DAY, AttendanceStatus.ABSENT)

    label = ReconciliationEngine(events, requests).resolve(record)

    assert (label.name, label.venue, label.source) == ("Hackathon", "Lab 3", LabelSource.OD_REQUEST)


def test_pending_and_rejected_requests_do_not_label():
    requests = [
        make_request(1, S1, from_date=DAY, to_date=DAY, status=RequestStatus.PENDING),
        make_request(2, S1, from_date=DAY, to_date=DAY, status=RequestStatus.REJECTED),
    ]
    record = make_record(S1, DAY, AttendanceStatus.ABSENT)

    assert ReconciliationEngine([], requests).resolve(record) == REGULAR_CLASS


def test_od_for_missing_event_falls_back_to_request_name_and_default_venue():
    requests = [make_request(1, S1, from_date=DAY, to_date=DAY, event_id=99, event_name="Robotics Meet")]
    record = make_record(S1, DAY, AttendanceStatus.PRESENT)

    label = ReconciliationEngine([], requests).resolve(record)

    assert (label.name, label.venue) == ("Robotics Meet", "Event Venue")


def test_od_without_event_id_resolves_event_by_name():
    events = [make_event(5, "Hackathon", venue="Lab 3")]
    requests = [make_request(1, S1, from_date=DAY, to_date=DAY, event_id=None, event_name="Hackathon")]

    label = ReconciliationEngine(events, requests).resolve(make_record(S1, DAY, AttendanceStatus.PRESENT))

    assert label.venue == "Lab 3"


def test_newest_of_overlapping_requests_wins():
    older = make_request(
        1, S1, from_date=DAY, to_date=DAY, event_name="Older", created_at=datetime(2024, 3, 1, 9, 0)
    )
    newer = make_request(
        2, S1, from_date=DAY, to_date=DAY, event_name="Newer", created_at=datetime(2024, 3, 2, 9, 0)
    )
    engine = ReconciliationEngine([], [newer, older])

    assert engine.resolve(make_record(S1, DAY, AttendanceStatus.PRESENT)).name == "Newer"
    assert len(engine.covering_requests(S1.email, DAY)) == 2


def test_deleted_event_falls_back_to_record_snapshot():
    record = make_record(
        S1, DAY, AttendanceStatus.PRESENT, event_id=7, event_name="Cultural Fest", event_venue="Open Air"
    )

    label = ReconciliationEngine([], []).resolve(record)

    assert (label.name, label.venue, label.source) == ("Cultural Fest", "Open Air", LabelSource.RECORD_SNAPSHOT)


def test_request_outside_the_day_leaves_regular_class():
    requests = [make_request(1, S1, from_date=date(2024, 3, 11), to_date=date(2024, 3, 12))]

    label = ReconciliationEngine([], requests).resolve(make_record(S1, DAY, AttendanceStatus.PRESENT))

    assert (label.name, label.venue) == ("Regular Class", "Classroom")


def test_covering_request_with_nothing_to_name_it_by_is_regular_class():
    requests = [make_request(1, S1, from_date=DAY, to_date=DAY, event_id=99, event_name="")]

    label = ReconciliationEngine([], requests).resolve(make_record(S1, DAY, AttendanceStatus.PRESENT))

    assert label == REGULAR_CLASS
