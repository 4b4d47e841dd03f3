from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..common.permissions import require_role, require_scope
from ..common.validators import require_date_range
from ..core.constants import UNKNOWN_EVENT_NAME
from ..core.enums import RequestStatus, Role
from ..core.exceptions import AuthorizationError, InvalidTransitionError, NotFoundError
from ..events.repository import EventRepository
from ..users.model import Principal, StudentFilter, User
from ..users.repository import UserRepository
from .eligibility import active_od_roster
from .model import Attachment, ODRequest, RequestFilter
from .repository import RequestRepository
from .state_machine import transition

logger = logging.getLogger(__name__)


class ODRequestService:
    def __init__(self, requests: RequestRepository, users: UserRepository, events: EventRepository):
        self._requests = requests
        self._users = users
        self._events = events

    def create_request(
        self,
        *,
        actor: Principal,
        event_id: Optional[int],
        from_date: date,
        to_date: date,
        attachment: Optional[Attachment] = None,
        now: Optional[datetime] = None,
    ) -> int:
        require_role(actor, Role.STUDENT)
        require_date_range(from_date, to_date)

        student = self._users.get_by_email(actor.email)
        if not student:
            raise NotFoundError("Student account not found")

        event = self._events.get_by_id(int(event_id)) if event_id is not None else None
        if event_id is not None and not event:
            logger.warning("OD request by %s references missing event %s", actor.email, event_id)

        request = ODRequest(
            request_id=0,
            student_email=student.email,
            student_name=student.name,
            student_department=student.department,
            student_section=student.section,
            event_id=event.event_id if event else None,
            event_name=event.name if event else UNKNOWN_EVENT_NAME,
            from_date=from_date,
            to_date=to_date,
            status=RequestStatus.PENDING,
            created_at=now or now_local(),
            attachment=attachment,
        )
        request_id = self._requests.create_request(request)
        logger.info("OD request %s created by %s for %s..%s", request_id, actor.email, from_date, to_date)
        return request_id

    def decide(
        self,
        *,
        actor: Principal,
        request_id: int,
        target: RequestStatus,
        now: Optional[datetime] = None,
    ) -> ODRequest:
        require_role(actor, Role.TEACHER)

        request = self._requests.get_request(int(request_id))
        if not request:
            raise NotFoundError("Request does not exist")
        require_scope(actor, department=request.student_department, section=request.student_section)

        decided = transition(request, target, actor_email=actor.email, now=now or now_local())

        # Another teacher may have decided between our read and this write.
        if not self._requests.set_status(
            request_id=decided.request_id,
            status=decided.status,
            actor_email=actor.email,
            decided_at=decided.approved_at,
        ):
            raise InvalidTransitionError(f"Request {request_id} has already been decided")

        logger.info("OD request %s %s by %s", request_id, target.value, actor.email)
        return decided

    def approve(self, *, actor: Principal, request_id: int, now: Optional[datetime] = None) -> ODRequest:
        return self.decide(actor=actor, request_id=request_id, target=RequestStatus.APPROVED, now=now)

    def reject(self, *, actor: Principal, request_id: int, now: Optional[datetime] = None) -> ODRequest:
        return self.decide(actor=actor, request_id=request_id, target=RequestStatus.REJECTED, now=now)

    def get_request(self, *, actor: Principal, request_id: int) -> ODRequest:
        request = self._requests.get_request(int(request_id))
        if not request:
            raise NotFoundError("Request does not exist")

        if actor.role == Role.STUDENT:
            if request.student_email != actor.email:
                raise AuthorizationError("This request belongs to another student")
        else:
            require_scope(actor, department=request.student_department, section=request.student_section)
        return request

    def list_mine(self, *, actor: Principal) -> Sequence[ODRequest]:
        require_role(actor, Role.STUDENT)
        return self._requests.list_requests(RequestFilter(student_email=actor.email))

    def list_for_teacher(self, *, actor: Principal, status: Optional[RequestStatus] = None) -> Sequence[ODRequest]:
        require_role(actor, Role.TEACHER, Role.ADMIN)
        return self._requests.list_requests(
            RequestFilter(
                status=status,
                department=actor.department or None,
                section=actor.section or None,
            )
        )

    def active_roster(
        self,
        *,
        actor: Principal,
        today: date,
        student_filter: Optional[StudentFilter] = None,
        event_name: Optional[str] = None,
    ) -> list[tuple[User, ODRequest]]:
        """Students of the teacher's section who are on OD today (pending or approved, not over)."""

        require_role(actor, Role.TEACHER, Role.ADMIN)
        student_filter = student_filter or StudentFilter()

        students = [
            s
            for s in self._users.list_users(student_filter)
            if actor.role == Role.ADMIN or actor.scopes(s.department, s.section)
        ]
        requests = self._requests.list_requests(
            RequestFilter(department=actor.department or None, section=actor.section or None, limit=None)
        )
        return active_od_roster(students, requests, today, event_name=event_name or None)
