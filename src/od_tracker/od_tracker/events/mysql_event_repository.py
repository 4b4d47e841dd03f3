from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_date
from .model import Event
from .repository import EventRepository

_COLUMNS = "event_id, name, description, venue, organizer, from_date, to_date, created_by, created_at"


def _to_event(r: dict) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        name=r["name"],
        description=r.get("description"),
        venue=r.get("venue"),
        organizer=r.get("organizer") or "",
        from_date=normalize_mysql_date(r["from_date"]),
        to_date=normalize_mysql_date(r["to_date"]),
        created_by=r["created_by"],
        created_at=r["created_at"],
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO events(name, description, venue, organizer, from_date, to_date, created_by)
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (name, description, venue, organizer, from_date, to_date, created_by),
            )
            return int(cur.lastrowid)

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def list_events(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events ORDER BY created_at DESC, event_id DESC")
            return [_to_event(r) for r in fetchall(cur)]

    def delete_event(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
