from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_principal, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required(container)
    def dashboard():
        return jsonify(container.dashboard_service.for_principal(current_principal()))
