from __future__ import annotations

from flask import Flask, jsonify

from ..common.auth import current_principal, login_required, roles_required
from ..common.http import json_body
from ..container import Container


def register(app: Flask, container: Container) -> None:
    admin_only = roles_required(container)

    @app.route("/api/me", methods=["GET"], endpoint="me")
    @login_required(container)
    def me():
        return jsonify(container.user_service.home_for(current_principal()))

    @app.route("/api/users", methods=["GET"], endpoint="list_users")
    @admin_only
    def list_users():
        users = container.user_service.list_all_users(current_role=current_principal().role)
        return jsonify({"users": users})

    @app.route("/api/users", methods=["POST"], endpoint="create_user")
    @admin_only
    def create_user():
        body = json_body()
        user = container.user_service.create_user(
            current_role=current_principal().role,
            email=body.get("email") or "",
            first_name=body.get("firstName") or "",
            last_name=body.get("lastName") or "",
            role=body.get("role") or "",
            password=body.get("password"),
        )
        return jsonify({"success": True, "message": "User created successfully", "user": user}), 201

    @app.route("/api/users", methods=["DELETE"], endpoint="delete_user")
    @admin_only
    def delete_user():
        body = json_body()
        container.user_service.delete_user(current_role=current_principal().role, user_id=body.get("userId") or "")
        return jsonify({"success": True, "message": "User deleted successfully"})

    @app.route("/api/users/role", methods=["POST"], endpoint="update_user_role")
    @admin_only
    def update_user_role():
        body = json_body()
        container.user_service.update_role(
            current_role=current_principal().role,
            user_id=body.get("userId") or "",
            role=body.get("role") or "",
        )
        return jsonify({"success": True, "message": "User role updated successfully"})

    @app.route("/api/users/roles/batch", methods=["POST"], endpoint="batch_update_roles")
    @admin_only
    def batch_update_roles():
        body = json_body()
        result = container.user_service.batch_update_roles(
            current_role=current_principal().role,
            updates=body.get("updates"),
        )
        return jsonify(result)

    @app.route("/api/users/default-role", methods=["POST"], endpoint="assign_default_role")
    @login_required(container)
    def assign_default_role():
        body = json_body()
        message = container.user_service.assign_default_role(
            user_id=body.get("userId") or "",
            email=body.get("email") or "",
        )
        return jsonify({"message": message})

    @app.route("/api/users/<user_id>/role", methods=["GET"], endpoint="get_user_role")
    @login_required(container)
    def get_user_role(user_id: str):
        return jsonify({"role": container.user_service.get_user_role(user_id=user_id)})
