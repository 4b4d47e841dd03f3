from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Event:
    """A named, time-boxed activity students may request OD for."""

    event_id: int
    name: str
    organizer: str
    from_date: date
    to_date: date
    created_by: str
    created_at: datetime
    description: Optional[str] = None
    venue: Optional[str] = None
