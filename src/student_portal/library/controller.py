from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.auth import current_principal, login_required, roles_required
from ..common.http import json_body
from ..container import Container
from .model import LibraryKind


def register(app: Flask, container: Container) -> None:
    def _add(kind: LibraryKind):
        item_id = container.library_service.add(kind, user_id=current_principal().user_id, data=json_body())
        return jsonify({"message": f"{kind.label} added successfully", "id": item_id}), 201

    def _update(kind: LibraryKind):
        container.library_service.update(kind, user_id=current_principal().user_id, data=json_body())
        return jsonify({"message": f"{kind.label} updated successfully"})

    def _delete(kind: LibraryKind):
        principal = current_principal()
        item_id = request.args.get("id") or json_body().get("id")
        container.library_service.delete(kind, user_id=principal.user_id, current_role=principal.role, item_id=item_id)
        return jsonify({"message": f"{kind.label} deleted successfully"})

    # -------- Archives --------
    @app.route("/api/archives", methods=["GET"], endpoint="list_archives")
    def list_archives():
        archives = container.library_service.list(LibraryKind.ARCHIVE, archive_type=request.args.get("archive_type"))
        return jsonify({"archives": archives})

    @app.route("/api/archives", methods=["POST"], endpoint="add_archive")
    @login_required(container)
    def add_archive():
        return _add(LibraryKind.ARCHIVE)

    @app.route("/api/archives", methods=["PUT"], endpoint="update_archive")
    @login_required(container)
    def update_archive():
        return _update(LibraryKind.ARCHIVE)

    @app.route("/api/archives", methods=["DELETE"], endpoint="delete_archive")
    @login_required(container)
    def delete_archive():
        return _delete(LibraryKind.ARCHIVE)

    # -------- Resources --------
    @app.route("/api/resources", methods=["GET"], endpoint="list_resources")
    def list_resources():
        return jsonify({"resources": container.library_service.list(LibraryKind.RESOURCE)})

    @app.route("/api/resources", methods=["POST"], endpoint="add_resource")
    @login_required(container)
    def add_resource():
        return _add(LibraryKind.RESOURCE)

    @app.route("/api/resources", methods=["PUT"], endpoint="update_resource")
    @login_required(container)
    def update_resource():
        return _update(LibraryKind.RESOURCE)

    @app.route("/api/resources", methods=["DELETE"], endpoint="delete_resource")
    @login_required(container)
    def delete_resource():
        return _delete(LibraryKind.RESOURCE)

    # -------- Admin --------
    @app.route("/api/admin/content", methods=["DELETE"], endpoint="clear_all_content")
    @roles_required(container)
    def clear_all_content():
        return jsonify(container.library_service.clear_all(current_role=current_principal().role))
