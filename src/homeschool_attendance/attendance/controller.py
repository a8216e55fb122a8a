from __future__ import annotations

from flask import Flask, Response, jsonify, request

from ..common.datetime_utils import current_school_year, school_year_options
from ..common.validators import require_iso_date
from ..common.web import current_owner, error_body, json_body, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .model import DayEntry, DayUpdate


def _parse_updates(data: dict) -> list[DayUpdate]:
    """Accept either explicit entries or one status applied to several students.

    ``{"entries": [{"student_id", "date", "status", "notes"?}, ...]}`` or
    ``{"date", "status", "notes"?, "student_ids": [...]}``.
    """

    if "entries" in data:
        raw_entries = data["entries"]
        if not isinstance(raw_entries, list):
            raise ValidationError("entries must be a list")
    else:
        student_ids = data.get("student_ids")
        if not isinstance(student_ids, list):
            raise ValidationError("Provide entries or student_ids")
        raw_entries = [
            {"student_id": sid, "date": data.get("date"), "status": data.get("status"), "notes": data.get("notes")}
            for sid in student_ids
        ]

    updates: list[DayUpdate] = []
    for raw in raw_entries:
        if not isinstance(raw, dict):
            raise ValidationError("Each entry must be an object")
        updates.append(
            DayUpdate(
                student_id=str(raw.get("student_id") or ""),
                date=require_iso_date(raw.get("date")),
                entry=DayEntry(status=raw.get("status"), notes=raw.get("notes")),
            )
        )
    return updates


def register(app: Flask, container: Container) -> None:
    store = container.store
    reports = container.report_service

    @app.route("/api/school-years", methods=["GET"], endpoint="school_years")
    @login_required
    def school_years():
        return jsonify({"current": current_school_year(), "options": school_year_options()})

    @app.route(
        "/api/students/<student_id>/attendance/<school_year>",
        methods=["GET"],
        endpoint="get_attendance_record",
    )
    @login_required
    def get_attendance_record(student_id: str, school_year: str):
        owner = current_owner()
        store.get_student(student_id, owner_id=owner)
        record = store.get_attendance_record(student_id, school_year, owner_id=owner)
        if record is None:
            return jsonify(error_body("NO_ATTENDANCE", "No attendance recorded for this school year")), 404
        return jsonify({"record": record.to_dict()})

    @app.route("/api/attendance/<school_year>/days", methods=["POST"], endpoint="upsert_days")
    @login_required
    def upsert_days(school_year: str):
        updates = _parse_updates(json_body())
        store.upsert_days(updates, current_owner(), school_year)
        return jsonify({"updated": len(updates)})

    @app.route("/api/attendance/<school_year>/overview", methods=["GET"], endpoint="year_overview")
    @login_required
    def year_overview(school_year: str):
        month = request.args.get("month", type=int)
        overview = reports.year_overview(owner_id=current_owner(), school_year=school_year, month=month)
        return jsonify(overview.to_dict())

    @app.route(
        "/api/students/<student_id>/attendance/<school_year>/summary",
        methods=["GET"],
        endpoint="year_summary",
    )
    @login_required
    def year_summary(student_id: str, school_year: str):
        report = reports.year_report(owner_id=current_owner(), student_id=student_id, school_year=school_year)
        return jsonify(report.to_dict())

    @app.route(
        "/api/students/<student_id>/attendance/<school_year>/summary.csv",
        methods=["GET"],
        endpoint="year_summary_csv",
    )
    @login_required
    def year_summary_csv(student_id: str, school_year: str):
        content = reports.year_report_csv(owner_id=current_owner(), student_id=student_id, school_year=school_year)
        filename = f"attendance_{school_year}_{student_id}.csv"
        return Response(
            content,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
