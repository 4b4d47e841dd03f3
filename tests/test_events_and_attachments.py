from __future__ import annotations

from datetime import date

import pytest

from src.od_tracker.od_tracker.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.od_tracker.od_tracker.requests.attachments import decode_attachment, encode_attachment
from src.od_tracker.od_tracker.users.model import Principal

from tests.fakes import ADMIN, TEACHER, make_container, make_event, make_user, principal


def test_teacher_creates_event():
    c = make_container()

    event_id = c.event_service.create_event(
        actor=TEACHER, name=" Symposium ", from_date=date(2024, 3, 1), to_date=date(2024, 3, 2), venue="Hall"
    )

    event = c.event_service.get_event(event_id)
    assert (event.name, event.venue, event.created_by) == ("Symposium", "Hall", TEACHER.email)


def test_event_needs_name_and_ordered_dates():
    c = make_container()
    with pytest.raises(ValidationError):
        c.event_service.create_event(actor=TEACHER, name="", from_date=date(2024, 3, 1), to_date=date(2024, 3, 1))
    with pytest.raises(ValidationError):
        c.event_service.create_event(actor=TEACHER, name="X", from_date=date(2024, 3, 2), to_date=date(2024, 3, 1))


def test_students_cannot_create_events():
    c = make_container()
    with pytest.raises(AuthorizationError):
        c.event_service.create_event(
            actor=principal(make_user("s1@x.edu")), name="X", from_date=date(2024, 3, 1), to_date=date(2024, 3, 1)
        )


def test_event_delete_by_creator_or_admin_only():
    c = make_container(events=[make_event(1, "Mine"), make_event(2, "Theirs", created_by="other@x.edu")])

    c.event_service.delete_event(actor=TEACHER, event_id=1)
    with pytest.raises(AuthorizationError):
        c.event_service.delete_event(actor=TEACHER, event_id=2)
    c.event_service.delete_event(actor=ADMIN, event_id=2)
    with pytest.raises(NotFoundError):
        c.event_service.delete_event(actor=ADMIN, event_id=2)

    assert c.event_service.list_events() == []


def test_attachment_exactly_at_the_default_limit_is_accepted():
    content = b"x" * (5 * 1024 * 1024)

    att = encode_attachment(content, mime_type="image/jpeg", filename="scan.jpg")

    assert decode_attachment(att) == content
    with pytest.raises(ValidationError):
        encode_attachment(content + b"x", mime_type="image/jpeg", filename="scan.jpg")


def test_attachment_is_stored_as_base64():
    att = encode_attachment(b"%PDF-1.4", mime_type="application/PDF", filename="letter.pdf")

    assert att.mime_type == "application/pdf"
    assert att.data_url.startswith("data:application/pdf;base64,")
    assert decode_attachment(att) == b"%PDF-1.4"


@pytest.mark.parametrize(
    "content, mime_type",
    [
        (b"", "image/png"),
        (b"x" * (1024 * 1024 + 1), "image/png"),
        (b"hello", "text/plain"),
    ],
)
def test_bad_attachments_are_refused(content, mime_type):
    with pytest.raises(ValidationError):
        encode_attachment(content, mime_type=mime_type, filename="f", max_size_mb=1)


def test_principal_scope_with_blank_teacher_section():
    teacher = Principal(email="t@x.edu", name="T", role=TEACHER.role, department="CSE")
    assert teacher.scopes("CSE", "B")
    assert not teacher.scopes("ECE", "B")
