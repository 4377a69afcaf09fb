from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import admin_required, body_date, current_actor, json_body, login_required, query_int
from ..container import Container
from ..core.exceptions import AuthorizationError


def register(app: Flask, container: Container) -> None:
    ledger = container.leave_ledger
    leaves = container.leave_service

    # -------- Balances --------
    @app.route("/api/leave-balances/my-balance", methods=["GET"], endpoint="my_leave_balance")
    @login_required
    def my_leave_balance():
        snapshot = ledger.get_balance_snapshot(current_actor().employee_id, query_int("year"))
        return jsonify(snapshot.to_dict())

    @app.route("/api/leave-balances", methods=["GET"], endpoint="all_leave_balances")
    @admin_required
    def all_leave_balances():
        return jsonify([s.to_dict() for s in ledger.list_balance_snapshots(query_int("year"))])

    @app.route("/api/leave-balances/<int:employee_id>", methods=["GET"], endpoint="employee_leave_balance")
    @admin_required
    def employee_leave_balance(employee_id: int):
        return jsonify(ledger.get_balance_snapshot(employee_id, query_int("year")).to_dict())

    @app.route("/api/leave-balances/initialize/<int:year>", methods=["POST"], endpoint="initialize_leave_balances")
    @admin_required
    def initialize_leave_balances(year: int):
        created = ledger.initialize_balances(year)
        return jsonify({"message": f"Leave balances initialized for {year}", "created": created})

    # -------- Requests --------
    @app.route("/api/leaves", methods=["GET"], endpoint="list_leaves")
    @login_required
    def list_leaves():
        actor = current_actor()
        employee_id = query_int("employeeId") if actor.is_admin else actor.employee_id
        rows = leaves.list_leave_requests(employee_id=employee_id, status=request.args.get("status") or None)
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/leaves", methods=["POST"], endpoint="create_leave")
    @login_required
    def create_leave():
        data = json_body()
        leave = leaves.admit_leave_request(
            employee_id=current_actor().employee_id,
            leave_type=data.get("leaveType"),
            start_date=body_date(data, "startDate"),
            end_date=body_date(data, "endDate"),
            reason=data.get("reason", ""),
        )
        return jsonify(leave.to_dict()), 201

    @app.route("/api/leaves/<int:request_id>", methods=["GET"], endpoint="get_leave")
    @login_required
    def get_leave(request_id: int):
        actor = current_actor()
        leave = leaves.get_leave_request(request_id)
        if not actor.is_admin and leave.employee_id != actor.employee_id:
            raise AuthorizationError("Not authorized to view this leave request")
        return jsonify(leave.to_dict())

    @app.route("/api/leaves/<int:request_id>", methods=["PUT"], endpoint="update_leave")
    @login_required
    def update_leave(request_id: int):
        data = json_body()
        leave = leaves.update_leave_request(
            request_id=request_id,
            actor_id=current_actor().employee_id,
            leave_type=data.get("leaveType"),
            start_date=body_date(data, "startDate"),
            end_date=body_date(data, "endDate"),
            reason=data.get("reason", ""),
        )
        return jsonify(leave.to_dict())

    @app.route("/api/leaves/<int:request_id>", methods=["DELETE"], endpoint="delete_leave")
    @login_required
    def delete_leave(request_id: int):
        leaves.delete_leave_request(request_id=request_id, actor_id=current_actor().employee_id)
        return jsonify({"message": "Leave request removed"})

    @app.route("/api/leaves/<int:request_id>/status", methods=["PUT"], endpoint="set_leave_status")
    @admin_required
    def set_leave_status(request_id: int):
        data = json_body()
        leave = leaves.set_status(
            request_id=request_id,
            actor_id=current_actor().employee_id,
            new_status=data.get("status"),
        )
        return jsonify(leave.to_dict())
