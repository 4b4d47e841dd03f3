from __future__ import annotations

from pathlib import Path
from zipfile import BadZipFile

import pandas as pd
from flask import Flask, request, session

from ..common.http import (
    current_principal,
    fail,
    login_required,
    ok,
    parse_enum,
    payload,
    roles_required,
    xlsx_download,
)
from ..core.constants import ALLOWED_ROSTER_EXTENSIONS
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from .importer import TEMPLATE_HEADERS, missing_required_headers, template_rows
from .model import Principal, StudentFilter

_IMPORT_ROLES = {"students": Role.STUDENT, "student": Role.STUDENT, "teachers": Role.TEACHER, "teacher": Role.TEACHER}


def _remember(principal: Principal, *, permanent: bool) -> None:
    session.clear()
    session.permanent = permanent
    session["email"] = principal.email
    session["name"] = principal.name
    session["role"] = principal.role.value
    session["department"] = principal.department
    session["section"] = principal.section


def read_roster_sheet(file_storage) -> list[dict]:
    """First worksheet of an uploaded .xlsx as a list of row dicts."""

    filename = (file_storage.filename or "").lower()
    if Path(filename).suffix not in ALLOWED_ROSTER_EXTENSIONS:
        raise ValidationError("Please upload an Excel workbook (.xlsx)")

    try:
        # "N/A" is a legitimate year for teachers; only empty cells count as missing
        df = pd.read_excel(
            file_storage.stream,
            sheet_name=0,
            engine="openpyxl",
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )
    except (ValueError, BadZipFile) as e:
        raise ValidationError(f"Could not read the spreadsheet: {e}")

    missing = missing_required_headers(df.columns)
    if missing:
        raise ValidationError(f"Missing required columns: {', '.join(missing)}")

    df = df.dropna(how="all")
    if df.empty:
        raise ValidationError("No valid data found in the Excel file")
    return df.to_dict(orient="records")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = payload()
        principal = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _remember(principal, permanent=bool(data.get("remember_me")))
        return ok(principal)

    @app.route("/api/auth/set-password", methods=["POST"], endpoint="set_password")
    def set_password():
        data = payload()
        if data.get("new_password") != data.get("confirm_password", data.get("new_password")):
            raise ValidationError("Passwords do not match")

        principal = container.auth_service.set_initial_password(
            email=data.get("email", ""),
            temp_password=data.get("temp_password", ""),
            new_password=data.get("new_password", ""),
        )
        _remember(principal, permanent=False)
        return ok(principal)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok(message="Logged out")

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        return ok(current_principal())

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @roles_required(Role.ADMIN, Role.TEACHER)
    def list_users():
        role = request.args.get("role")
        user_filter = StudentFilter(
            role=parse_enum(Role, role, "role") if role else None,
            department=request.args.get("department") or None,
            section=request.args.get("section") or None,
            year=request.args.get("year") or None,
        )
        users = container.user_service.list_users(actor=current_principal(), user_filter=user_filter)
        return ok([_public(u) for u in users])

    @app.route("/api/admin/users", methods=["POST"], endpoint="add_user")
    @roles_required(Role.ADMIN)
    def add_user():
        data = payload()
        user = container.user_service.create_account(
            actor=current_principal(),
            name=data.get("name", ""),
            email=data.get("email", ""),
            role=parse_enum(Role, data.get("role", "student"), "role"),
            department=data.get("department", ""),
            section=data.get("section", ""),
            year=str(data.get("year", "")),
            temp_password=data.get("password", ""),
        )
        return ok(_public(user), 201)

    @app.route("/api/admin/users/<path:email>", methods=["DELETE"], endpoint="delete_user")
    @roles_required(Role.ADMIN)
    def delete_user(email: str):
        container.user_service.delete_user(actor=current_principal(), email=email)
        return ok(message="User deleted")

    @app.route("/api/admin/users/import", methods=["POST"], endpoint="import_users")
    @roles_required(Role.ADMIN)
    def import_users():
        upload = request.files.get("file")
        if upload is None:
            return fail("No file selected", 400)

        role = _IMPORT_ROLES.get((request.form.get("type") or "students").strip().lower())
        if role is None:
            return fail("type must be 'students' or 'teachers'", 400)

        rows = read_roster_sheet(upload)
        result = container.roster_importer.import_rows(actor=current_principal(), rows=rows, role=role)
        body = {
            "created": result.created,
            "errors": [{"row": row, "message": msg} for row, msg in result.errors],
        }
        if not result.ok:
            return fail(f"Failed to process any {role.value} rows. Check file format.", 400, **body)
        return ok(body)

    @app.route("/api/admin/users/template", methods=["GET"], endpoint="roster_template")
    @roles_required(Role.ADMIN)
    def roster_template():
        role = _IMPORT_ROLES.get((request.args.get("type") or "students").strip().lower())
        if role is None:
            return fail("type must be 'students' or 'teachers'", 400)

        plural = f"{role.value}s"
        return xlsx_download(
            template_rows(role),
            sheet_name=plural.title(),
            filename=f"{plural}_template.xlsx",
            columns=list(TEMPLATE_HEADERS),
        )


def _public(user) -> dict:
    return {
        "email": user.email,
        "name": user.name,
        "role": user.role.value,
        "department": user.department,
        "section": user.section,
        "year": user.year,
        "credential_state": user.credential_state.value,
    }
