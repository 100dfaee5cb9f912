from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.guards import current_actor, login_required, require_role
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    announcements = container.announcement_service
    audit = container.audit

    @app.route("/api/announcements", methods=["GET"], endpoint="announcements_list")
    @login_required
    def announcements_list():
        return jsonify({"success": True, "data": [a.to_dict() for a in announcements.list_recent()]})

    @app.route("/api/announcements", methods=["POST"], endpoint="announcements_create")
    @require_role(Role.ADMIN, Role.TEACHER)
    def announcements_create():
        body = request.get_json(silent=True) or {}
        actor_id, actor_name = current_actor()
        announcement_id = announcements.post(title=body.get("title"), content=body.get("content"), created_by=actor_id)
        audit.log_action(actor_id, actor_name, "CREATE_ANNOUNCEMENT", {"id": announcement_id, "title": body.get("title")})
        return jsonify({"success": True, "message": "Announcement posted."}), 201

    @app.route("/api/announcements/<int:announcement_id>", methods=["DELETE"], endpoint="announcements_delete")
    @require_role(Role.ADMIN, Role.TEACHER)
    def announcements_delete(announcement_id: int):
        announcements.delete(announcement_id)
        audit.log_action(*current_actor(), "DELETE_ANNOUNCEMENT", {"id": announcement_id})
        return jsonify({"success": True, "message": "Announcement deleted."})
