from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_principal, login_required, ok, payload, roles_required
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events", methods=["GET"], endpoint="list_events")
    @login_required
    def list_events():
        return ok(container.event_service.list_events())

    @app.route("/api/events", methods=["POST"], endpoint="create_event")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def create_event():
        data = payload()
        if not data.get("from_date") or not data.get("to_date"):
            raise ValidationError("Please fill in all required fields")

        event_id = container.event_service.create_event(
            actor=current_principal(),
            name=data.get("name", ""),
            from_date=parse_iso_date(data["from_date"]),
            to_date=parse_iso_date(data["to_date"]),
            organizer=data.get("organizer", ""),
            description=data.get("description", ""),
            venue=data.get("venue", ""),
        )
        return ok({"event_id": event_id}, 201)

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="delete_event")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def delete_event(event_id: int):
        container.event_service.delete_event(actor=current_principal(), event_id=event_id)
        return ok(message="Event deleted")
