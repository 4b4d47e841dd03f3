from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.http import (
    current_principal,
    login_required,
    ok,
    optional_date,
    parse_enum,
    payload,
    roles_required,
    xlsx_download,
)
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from ..container import Container
from ..users.model import StudentFilter
from .model import AttendanceView, RecordFilter


def view_json(view: AttendanceView) -> dict:
    r = view.record
    return {
        "record_id": r.record_id,
        "student_email": r.student_email,
        "student_name": r.student_name,
        "department": r.student_department,
        "section": r.student_section,
        "date": r.on_date.isoformat(),
        "status": r.status.value,
        "event_name": view.event_name,
        "event_venue": view.event_venue,
        "label_source": view.label.source.value,
        "marked_by": r.marked_by,
        "updated_at": r.updated_at.isoformat() if r.updated_at else None,
    }


def record_filter_from(args) -> RecordFilter:
    return RecordFilter(
        on_date=optional_date(args.get("date")),
        start_date=optional_date(args.get("start_date")),
        end_date=optional_date(args.get("end_date")),
        student_email=(args.get("student_email") or "").strip().lower() or None,
        department=args.get("department") or None,
        section=args.get("section") or None,
    )


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    @login_required
    def list_attendance():
        views = service.list_enriched(actor=current_principal(), record_filter=record_filter_from(request.args))
        return ok([view_json(v) for v in views], summary=service.summary(views).__dict__)

    @app.route("/api/attendance/export", methods=["GET"], endpoint="export_attendance")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def export_attendance():
        views = service.list_enriched(actor=current_principal(), record_filter=record_filter_from(request.args))
        rows = [
            {
                "Date": v.record.on_date.isoformat(),
                "Name": v.record.student_name,
                "Email": v.record.student_email,
                "Department": v.record.student_department,
                "Section": v.record.student_section,
                "Status": v.record.status.value,
                "Event": v.event_name,
                "Venue": v.event_venue,
            }
            for v in views
        ]
        return xlsx_download(
            rows,
            sheet_name="Attendance",
            filename=f"attendance_{now_local():%Y%m%d}.xlsx",
            columns=["Date", "Name", "Email", "Department", "Section", "Status", "Event", "Venue"],
        )

    @app.route("/api/attendance/self", methods=["POST"], endpoint="mark_self")
    @roles_required(Role.STUDENT)
    def mark_self():
        data = payload()
        record = service.mark_self(
            actor=current_principal(),
            on_date=optional_date(data.get("date")) or now_local().date(),
            status=parse_enum(AttendanceStatus, data.get("status"), "status"),
        )
        return ok({"record_id": record.record_id, "status": record.status.value})

    @app.route("/api/attendance/week", methods=["GET"], endpoint="attendance_week")
    @roles_required(Role.STUDENT)
    def attendance_week():
        today = optional_date(request.args.get("today")) or now_local().date()
        return ok(service.week_view(actor=current_principal(), today=today))

    @app.route("/api/attendance/<student_email>/<on_date>", methods=["PUT"], endpoint="update_attendance")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def update_attendance(student_email: str, on_date: str):
        data = payload()
        record = service.update_status(
            actor=current_principal(),
            student_email=student_email.strip().lower(),
            on_date=parse_iso_date(on_date),
            status=parse_enum(AttendanceStatus, data.get("status"), "status"),
        )
        return ok({"record_id": record.record_id, "status": record.status.value})

    @app.route("/api/attendance/bulk", methods=["POST"], endpoint="bulk_mark")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def bulk_mark():
        data = payload()
        event_id = data.get("event_id")
        try:
            event_id = int(event_id) if event_id not in (None, "") else None
        except (TypeError, ValueError):
            raise ValidationError("event_id must be a number")

        result = service.bulk_mark(
            actor=current_principal(),
            status=parse_enum(AttendanceStatus, data.get("status", "present"), "status"),
            student_filter=StudentFilter(
                department=data.get("department") or None,
                section=data.get("section") or None,
                year=data.get("year") or None,
            ),
            on_date=optional_date(data.get("date")),
            event_id=event_id,
            event_name=data.get("event_name") or None,
        )
        return ok(
            result,
            message=f"Marked {len(result.created)} students; {len(result.skipped)} already had a record",
        )

    @app.route("/api/attendance/duplicates", methods=["GET"], endpoint="attendance_duplicates")
    @roles_required(Role.TEACHER, Role.ADMIN)
    def attendance_duplicates():
        anomalies = service.audit_duplicates(
            actor=current_principal(), on_date=optional_date(request.args.get("date"))
        )
        return ok(
            [
                {"student_email": a.student_email, "date": a.on_date.isoformat(), "record_ids": list(a.record_ids)}
                for a in anomalies
            ]
        )

    @app.route("/api/admin/users/<student_email>/backfill", methods=["POST"], endpoint="backfill_snapshot")
    @roles_required(Role.ADMIN)
    def backfill_snapshot(student_email: str):
        changed = service.backfill_student_snapshot(actor=current_principal(), student_email=student_email)
        return ok({"updated": changed})
