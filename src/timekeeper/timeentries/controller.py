from __future__ import annotations

from datetime import datetime

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import admin_required, json_errors, login_required
from ..container import Container
from ..core.exceptions import ValidationError


def _parse_time(value, field_name: str):
    v = (value or "").strip()
    if not v:
        return None
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"{field_name} must be HH:MM")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/clock-in", methods=["POST"], endpoint="clock_in")
    @login_required
    @json_errors
    def clock_in():
        entry_id = container.time_tracking_service.clock_in(int(session["user_id"]))
        return jsonify({"success": True, "entryId": entry_id})

    @app.route("/api/clock-out", methods=["POST"], endpoint="clock_out")
    @login_required
    @json_errors
    def clock_out():
        data = request.get_json(silent=True) or {}
        requested = container.time_tracking_service.clock_out(
            int(session["user_id"]),
            overtime_note=data.get("overtimeNote"),
        )
        return jsonify({"success": True, "overtimeRequested": requested})

    @app.route("/api/today-entry", methods=["GET"], endpoint="today_entry")
    @login_required
    @json_errors
    def today_entry():
        entry = container.time_tracking_service.today_entry(int(session["user_id"]))
        return jsonify(entry.to_dict() if entry else None)

    @app.route("/api/active-users", methods=["GET"], endpoint="active_users")
    @admin_required
    @json_errors
    def active_users():
        return jsonify([r.to_dict() for r in container.time_tracking_service.clocked_in_now()])

    @app.route("/api/overtime-requests", methods=["GET"], endpoint="overtime_requests")
    @admin_required
    @json_errors
    def overtime_requests():
        rows = container.time_tracking_service.pending_overtime()
        return jsonify(
            [
                {
                    "id": r.entry_id,
                    "user_id": r.user_id,
                    "username": r.username,
                    "department": r.department,
                    "clock_in": r.clock_in.strftime("%Y-%m-%d %H:%M:%S"),
                    "clock_out": r.clock_out.strftime("%Y-%m-%d %H:%M:%S") if r.clock_out else None,
                    "overtime_note": r.overtime_note,
                }
                for r in rows
            ]
        )

    @app.route("/api/overtime-requests/<int:entry_id>/approve", methods=["POST"], endpoint="overtime_decide")
    @admin_required
    @json_errors
    def overtime_decide(entry_id: int):
        data = request.get_json(silent=True) or {}
        if not isinstance(data.get("approved"), bool):
            raise ValidationError("approved must be true or false")
        container.time_tracking_service.decide_overtime(
            entry_id=entry_id,
            approved=data["approved"],
            admin_user_id=int(session["user_id"]),
        )
        return jsonify({"success": True})

    @app.route("/api/users/<int:user_id>/adjust-time", methods=["POST"], endpoint="adjust_time")
    @admin_required
    @json_errors
    def adjust_time(user_id: int):
        data = request.get_json(silent=True) or {}
        try:
            work_date = parse_iso_date(str(data.get("date") or ""))
        except ValueError:
            raise ValidationError("date must be YYYY-MM-DD")
        clock_in_t = _parse_time(data.get("clockIn"), "clockIn")
        if not clock_in_t:
            raise ValidationError("clockIn is required")

        container.time_tracking_service.adjust_time(
            user_id=user_id,
            work_date=work_date,
            clock_in=clock_in_t,
            clock_out=_parse_time(data.get("clockOut"), "clockOut"),
        )
        return jsonify({"success": True})
