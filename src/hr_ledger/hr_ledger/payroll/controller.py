from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, current_actor, json_body, login_required, query_int
from ..common.money import to_money
from ..container import Container
from ..core.constants import DEFAULT_STATS_LIMIT
from ..core.exceptions import AuthorizationError, ValidationError
from .model import PayrollPatch, parse_line_items


def _required_int(data: dict, key: str) -> int:
    try:
        return int(data[key])
    except KeyError:
        raise ValidationError(f"{key} is required")
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number")


def register(app: Flask, container: Container) -> None:
    payrolls = container.payroll_service
    generator = container.payroll_generator
    aggregator = container.payroll_aggregator

    @app.route("/api/payroll", methods=["GET"], endpoint="list_payrolls")
    @login_required
    def list_payrolls():
        actor = current_actor()
        employee_id = query_int("employeeId") if actor.is_admin else actor.employee_id
        rows = payrolls.list_payrolls(month=query_int("month"), year=query_int("year"), employee_id=employee_id)
        return jsonify([p.to_dict() for p in rows])

    @app.route("/api/payroll", methods=["POST"], endpoint="create_payroll")
    @admin_required
    def create_payroll():
        data = json_body()
        payroll = payrolls.create_payroll(
            employee_id=_required_int(data, "employeeId"),
            month=_required_int(data, "month"),
            year=_required_int(data, "year"),
            basic_salary=data.get("basicSalary"),
            overtime_hours=to_money(data.get("overtimeHours"), "overtimeHours"),
            allowances=parse_line_items(data.get("allowances")),
            deductions=parse_line_items(data.get("deductions")),
            remarks=data.get("remarks"),
        )
        return jsonify(payroll.to_dict()), 201

    @app.route("/api/payroll/generate", methods=["POST"], endpoint="generate_payroll")
    @admin_required
    def generate_payroll():
        data = json_body()
        result = generator.generate_for_period(month=_required_int(data, "month"), year=_required_int(data, "year"))
        return jsonify(result.to_dict()), (201 if result.created else 200)

    @app.route("/api/payroll/my-payroll", methods=["GET"], endpoint="my_payroll")
    @login_required
    def my_payroll():
        return jsonify(aggregator.employee_history(current_actor().employee_id).to_dict())

    @app.route("/api/payroll/stats", methods=["GET"], endpoint="payroll_stats")
    @admin_required
    def payroll_stats():
        limit = query_int("limit")
        if limit is None:
            limit = DEFAULT_STATS_LIMIT
        return jsonify([m.to_dict() for m in aggregator.monthly_totals(limit)])

    @app.route("/api/payroll/company-totals", methods=["GET"], endpoint="payroll_company_totals")
    @admin_required
    def payroll_company_totals():
        return jsonify(aggregator.current_month_company_totals().to_dict())

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="get_payroll")
    @login_required
    def get_payroll(payroll_id: int):
        actor = current_actor()
        payroll = payrolls.get_payroll(payroll_id)
        if not actor.is_admin and payroll.employee_id != actor.employee_id:
            raise AuthorizationError("Not authorized to view this payroll")
        return jsonify(payroll.to_dict())

    @app.route("/api/payroll/<int:payroll_id>", methods=["PUT"], endpoint="update_payroll")
    @admin_required
    def update_payroll(payroll_id: int):
        result = payrolls.update_payroll(payroll_id, PayrollPatch.from_mapping(json_body()))
        return jsonify(result.to_dict())

    @app.route("/api/payroll/<int:payroll_id>", methods=["DELETE"], endpoint="delete_payroll")
    @admin_required
    def delete_payroll(payroll_id: int):
        payrolls.delete_payroll(payroll_id)
        return jsonify({"message": "Payroll removed"})
