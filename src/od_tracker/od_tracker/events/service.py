from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..common.permissions import require_role
from ..common.validators import require_date_range, require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..users.model import Principal
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


class EventService:
    def __init__(self, events: EventRepository):
        self._events = events

    def create_event(
        self,
        *,
        actor: Principal,
        name: str,
        from_date: date,
        to_date: date,
        organizer: str = "",
        description: str = "",
        venue: str = "",
    ) -> int:
        require_role(actor, Role.TEACHER, Role.ADMIN)

        name = require_non_empty(name, "Event name")
        require_date_range(from_date, to_date)

        event_id = self._events.create_event(
            name=name,
            organizer=(organizer or "").strip(),
            from_date=from_date,
            to_date=to_date,
            created_by=actor.email,
            description=(description or "").strip() or None,
            venue=(venue or "").strip() or None,
        )
        logger.info("%s created event %s (%s)", actor.email, event_id, name)
        return event_id

    def list_events(self) -> Sequence[Event]:
        return self._events.list_events()

    def get_event(self, event_id: int) -> Optional[Event]:
        return self._events.get_by_id(int(event_id))

    def delete_event(self, *, actor: Principal, event_id: int) -> None:
        """Admins delete any event, teachers only the ones they created.

        OD requests and attendance records keep their denormalized event name.
        """
        require_role(actor, Role.TEACHER, Role.ADMIN)

        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Event does not exist")
        if actor.role != Role.ADMIN and event.created_by != actor.email:
            raise AuthorizationError("Only the creator or an admin can delete this event")

        if not self._events.delete_event(int(event_id)):
            raise NotFoundError("Event does not exist")
        logger.info("%s deleted event %s", actor.email, event_id)
