from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import admin_required, json_body, login_required
from ..container import Container
from .service import settings_from_mapping


def register(app: Flask, container: Container) -> None:
    service = container.settings_service

    @app.route("/api/settings", methods=["GET"], endpoint="get_settings")
    @login_required
    def get_settings():
        return jsonify(service.get_settings().to_dict())

    @app.route("/api/settings", methods=["POST"], endpoint="create_settings")
    @admin_required
    def create_settings():
        created = service.create_settings(settings_from_mapping(json_body()))
        return jsonify(created.to_dict()), 201

    @app.route("/api/settings", methods=["PUT"], endpoint="update_settings")
    @admin_required
    def update_settings():
        return jsonify(service.update_settings(json_body()).to_dict())
