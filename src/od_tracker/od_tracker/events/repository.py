from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def create_event(
        self,
        *,
        name: str,
        organizer: str,
        from_date: date,
        to_date: date,
        created_by: str,
        description: Optional[str] = None,
        venue: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_events(self) -> Sequence[Event]:
        """Newest first (created_at DESC)."""

        raise NotImplementedError

    def delete_event(self, event_id: int) -> bool:
        raise NotImplementedError
