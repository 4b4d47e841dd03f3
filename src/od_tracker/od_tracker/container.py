from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .requests.mysql_request_repository import MySQLRequestRepository
from .requests.repository import RequestRepository
from .requests.service import ODRequestService
from .users.importer import RosterImporter
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    events_repo: EventRepository
    requests_repo: RequestRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    user_service: UserService
    roster_importer: RosterImporter
    event_service: EventService
    request_service: ODRequestService
    attendance_service: AttendanceService

    max_attachment_mb: int = 5


def wire(*, users_repo, events_repo, requests_repo, attendance_repo, max_attachment_mb: int = 5) -> Container:
    """Build services over any repositories that satisfy the repository protocols."""

    return Container(
        users_repo=users_repo,
        events_repo=events_repo,
        requests_repo=requests_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        roster_importer=RosterImporter(users_repo),
        event_service=EventService(events_repo),
        request_service=ODRequestService(requests_repo, users_repo, events_repo),
        attendance_service=AttendanceService(attendance_repo, users_repo, events_repo, requests_repo),
        max_attachment_mb=int(max_attachment_mb),
    )


def build_container(*, db_config: dict, max_attachment_mb: int = 5) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", 10)),
    )
    conn = DatabaseConnection.get_instance(config)

    return wire(
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        requests_repo=MySQLRequestRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        max_attachment_mb=max_attachment_mb,
    )
