"""Decide what an attendance entry was *for*: an event or regular class.

Sources are consulted in order:

1. the record's own ``event_id``, resolved against the event catalog;
2. an approved OD request of the same student whose date range contains the
   record's day (both ends inclusive). If several overlap, the first one in
   ledger order wins; the ledger lists newest requests first;
3. the record's own event snapshot, when its event was deleted;
4. ``Regular Class`` in the ``Classroom``.

Events or requests that vanished after being referenced are tolerated.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Optional, Sequence

from ..core.constants import DEFAULT_EVENT_VENUE, REGULAR_CLASS_NAME, REGULAR_CLASS_VENUE
from ..core.enums import RequestStatus
from ..events.model import Event
from ..requests.model import ODRequest
from .model import AttendanceRecord, AttendanceView, EventLabel, LabelSource

logger = logging.getLogger(__name__)

REGULAR_CLASS = EventLabel(REGULAR_CLASS_NAME, REGULAR_CLASS_VENUE, LabelSource.REGULAR_CLASS)


class ReconciliationEngine:
    def __init__(self, events: Iterable[Event], requests: Iterable[ODRequest]):
        self._events_by_id: dict[int, Event] = {}
        self._events_by_name: dict[str, Event] = {}
        for e in events:
            self._events_by_id[e.event_id] = e
            self._events_by_name.setdefault(e.name, e)

        # Keeps ledger order per student; that order is the tie-break.
        self._approved: dict[str, list[ODRequest]] = {}
        for r in requests:
            if r.status == RequestStatus.APPROVED:
                self._approved.setdefault(r.student_email, []).append(r)

    def covering_requests(self, student_email: str, day: date) -> list[ODRequest]:
        return [r for r in self._approved.get(student_email, ()) if r.covers(day)]

    def resolve(self, record: AttendanceRecord) -> EventLabel:
        if record.event_id is not None:
            event = self._events_by_id.get(record.event_id)
            if event:
                return EventLabel(event.name, event.venue or DEFAULT_EVENT_VENUE, LabelSource.RECORD_EVENT)

        covering = self.covering_requests(record.student_email, record.on_date)
        if covering:
            if len(covering) > 1:
                logger.warning(
                    "%s approved OD requests overlap %s for %s; using request %s",
                    len(covering),
                    record.on_date,
                    record.student_email,
                    covering[0].request_id,
                )
            return self._label_for_request(covering[0])

        if record.event_id is not None and record.event_name:
            return EventLabel(
                record.event_name, record.event_venue or DEFAULT_EVENT_VENUE, LabelSource.RECORD_SNAPSHOT
            )

        return REGULAR_CLASS

    def _label_for_request(self, request: ODRequest) -> EventLabel:
        event: Optional[Event] = None
        if request.event_id is not None:
            event = self._events_by_id.get(request.event_id)
        elif request.event_name:
            event = self._events_by_name.get(request.event_name)

        if event:
            name = event.name if request.event_id is not None else request.event_name
            return EventLabel(name, event.venue or DEFAULT_EVENT_VENUE, LabelSource.OD_REQUEST)
        if request.event_name:
            return EventLabel(request.event_name, DEFAULT_EVENT_VENUE, LabelSource.OD_REQUEST)
        # nothing to name the request by
        return REGULAR_CLASS

    def enrich(self, records: Sequence[AttendanceRecord]) -> list[AttendanceView]:
        return [AttendanceView(record=r, label=self.resolve(r)) for r in records]
