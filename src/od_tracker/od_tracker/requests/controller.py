from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import current_principal, login_required, ok, optional_date, parse_enum, payload, roles_required
from ..core.enums import RequestStatus, Role
from ..core.exceptions import NotFoundError, ValidationError
from ..container import Container
from ..users.model import StudentFilter
from .attachments import decode_attachment, encode_attachment
from .model import ODRequest


def request_json(r: ODRequest) -> dict:
    """Ledger entry without the inline document body."""
    return {
        "request_id": r.request_id,
        "student_email": r.student_email,
        "student_name": r.student_name,
        "student_department": r.student_department,
        "student_section": r.student_section,
        "event_id": r.event_id,
        "event_name": r.event_name,
        "from_date": r.from_date.isoformat(),
        "to_date": r.to_date.isoformat(),
        "status": r.status.value,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "approved_by": r.approved_by,
        "approved_at": r.approved_at.isoformat() if r.approved_at else None,
        "has_attachment": r.attachment is not None,
        "attachment_name": r.attachment.filename if r.attachment else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/od-requests", methods=["POST"], endpoint="submit_od_request")
    @roles_required(Role.STUDENT)
    def submit_od_request():
        data = payload()
        if not data.get("from_date") or not data.get("to_date"):
            raise ValidationError("From and To dates are required")

        attachment = None
        upload = request.files.get("file")
        if upload is not None and upload.filename:
            attachment = encode_attachment(
                upload.read(),
                mime_type=upload.mimetype,
                filename=upload.filename,
                max_size_mb=container.max_attachment_mb,
            )

        event_id = data.get("event_id")
        try:
            event_id = int(event_id) if event_id not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("event_id must be a number")

        request_id = container.request_service.create_request(
            actor=current_principal(),
            event_id=event_id,
            from_date=parse_iso_date(data["from_date"]),
            to_date=parse_iso_date(data["to_date"]),
            attachment=attachment,
        )
        return ok({"request_id": request_id}, 201)

    @app.route("/api/od-requests", methods=["GET"], endpoint="list_od_requests")
    @login_required
    def list_od_requests():
        actor = current_principal()
        if actor.role == Role.STUDENT:
            items = container.request_service.list_mine(actor=actor)
        else:
            status = request.args.get("status")
            items = container.request_service.list_for_teacher(
                actor=actor,
                status=parse_enum(RequestStatus, status, "status") if status else None,
            )
        return ok([request_json(r) for r in items])

    @app.route("/api/od-requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_od_request")
    @roles_required(Role.TEACHER)
    def approve_od_request(request_id: int):
        decided = container.request_service.approve(actor=current_principal(), request_id=request_id)
        return ok(request_json(decided))

    @app.route("/api/od-requests/<int:request_id>/reject", methods=["POST"], endpoint="reject_od_request")
    @roles_required(Role.TEACHER)
    def reject_od_request(request_id: int):
        decided = container.request_service.reject(actor=current_principal(), request_id=request_id)
        return ok(request_json(decided))

    @app.route("/api/od-requests/<int:request_id>/attachment", methods=["GET"], endpoint="od_attachment")
    @login_required
    def od_attachment(request_id: int):
        od = container.request_service.get_request(actor=current_principal(), request_id=request_id)
        if od.attachment is None:
            raise NotFoundError("This request has no attachment")

        return send_file(
            io.BytesIO(decode_attachment(od.attachment)),
            mimetype=od.attachment.mime_type,
            download_name=od.attachment.filename,
        )

    @app.route("/api/od-roster", methods=["GET"], endpoint="od_roster")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def od_roster():
        args = request.args
        today = optional_date(args.get("date")) or now_local().date()
        roster = container.request_service.active_roster(
            actor=current_principal(),
            today=today,
            student_filter=StudentFilter(
                department=args.get("department") or None,
                section=args.get("section") or None,
                year=args.get("year") or None,
            ),
            event_name=args.get("event") or None,
        )
        return ok(
            [
                {
                    "email": student.email,
                    "name": student.name,
                    "department": student.department,
                    "section": student.section,
                    "year": student.year,
                    "request": request_json(od),
                }
                for student, od in roster
            ]
        )
