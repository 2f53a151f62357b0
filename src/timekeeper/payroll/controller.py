from __future__ import annotations

from datetime import date

from flask import Flask, jsonify, request, session

from ..common.http import admin_required, json_errors, login_required
from ..container import Container
from ..core.exceptions import ValidationError
from .period import period_from_request


def _user_ids(value) -> list[int] | None:
    if not value:
        return None
    try:
        return [int(v) for v in value]
    except (TypeError, ValueError):
        raise ValidationError("userIds must be a list of integers")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/payslips/generate", methods=["POST"], endpoint="payslips_generate")
    @admin_required
    @json_errors
    def payslips_generate():
        data = request.get_json(silent=True) or {}
        period = period_from_request(
            week_start=data.get("weekStart"),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            selected_dates=data.get("selectedDates"),
        )
        payslips = container.payroll_service.generate(period, user_ids=_user_ids(data.get("userIds")))
        return jsonify([p.to_dict() for p in payslips])

    @app.route("/api/payroll-report", methods=["GET"], endpoint="payroll_report")
    @admin_required
    @json_errors
    def payroll_report():
        period = period_from_request(
            week_start=request.args.get("weekStart"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
            selected_dates=request.args.get("selectedDates"),
        )
        if request.args.get("weekStart"):
            # Weekly reports are keyed on week_start alone.
            report = container.payroll_report_service.report(period.start)
        else:
            report = container.payroll_report_service.report_for_period(period)
        return jsonify({"rows": [r.to_dict() for r in report.rows], "summary": report.summary})

    @app.route("/api/payroll/<int:payslip_id>", methods=["PUT"], endpoint="payroll_edit")
    @admin_required
    @json_errors
    def payroll_edit(payslip_id: int):
        data = request.get_json(silent=True) or {}
        total = container.payroll_report_service.edit_payslip(payslip_id, data)
        return jsonify({"success": True, "total_salary": str(total)})

    @app.route("/api/payslips/release", methods=["POST"], endpoint="payslips_release")
    @admin_required
    @json_errors
    def payslips_release():
        data = request.get_json(silent=True) or {}
        period = period_from_request(
            week_start=data.get("weekStart"),
            start_date=data.get("startDate"),
            end_date=data.get("endDate"),
            selected_dates=data.get("selectedDates"),
        )
        count = container.payroll_report_service.release(period, user_ids=_user_ids(data.get("userIds")))
        return jsonify({"success": True, "releasedCount": count, "message": f"Released {count} payslip(s)"})

    @app.route("/api/user-payroll-history", methods=["GET"], endpoint="user_payroll_history")
    @login_required
    @json_errors
    def user_payroll_history():
        year_s = request.args.get("year") or str(date.today().year)
        if not year_s.isdigit():
            raise ValidationError("year must be a number")
        payslips = container.payroll_report_service.history_for_user(int(session["user_id"]), year=int(year_s))
        return jsonify([p.to_dict() for p in payslips])
