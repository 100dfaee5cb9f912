from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local
from ..common.guards import current_actor, current_user, require_role
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    excuses = container.excuse_service
    audit = container.audit

    @app.route("/api/excuses", methods=["GET"], endpoint="excuses_pending")
    @require_role(Role.ADMIN, Role.TEACHER)
    def excuses_pending():
        return jsonify({"success": True, "data": [e.to_dict() for e in excuses.list_pending()]})

    @app.route("/api/excuses/history", methods=["GET"], endpoint="excuses_history")
    @require_role(Role.ADMIN, Role.TEACHER)
    def excuses_history():
        return jsonify({"success": True, "data": [e.to_dict() for e in excuses.list_history()]})

    @app.route("/api/excuses/<int:excuse_id>/approve", methods=["PUT"], endpoint="excuses_approve")
    @require_role(Role.ADMIN, Role.TEACHER)
    def excuses_approve(excuse_id: int):
        actor_id, actor_name = current_actor()
        excuse = excuses.approve(excuse_id, processed_by=actor_id)
        audit.log_action(actor_id, actor_name, "APPROVE_EXCUSE", {"excuse_id": excuse_id, "student_user_id": excuse.user_id})
        return jsonify({"message": "Excuse approved and attendance updated."})

    @app.route("/api/excuses/<int:excuse_id>/deny", methods=["PUT"], endpoint="excuses_deny")
    @require_role(Role.ADMIN, Role.TEACHER)
    def excuses_deny(excuse_id: int):
        actor_id, actor_name = current_actor()
        excuses.deny(excuse_id, processed_by=actor_id)
        audit.log_action(actor_id, actor_name, "DENY_EXCUSE", {"excuse_id": excuse_id})
        return jsonify({"message": "Excuse denied."})

    @app.route("/api/excuses/<int:excuse_id>", methods=["PUT"], endpoint="excuses_update")
    @require_role(Role.ADMIN, Role.TEACHER)
    def excuses_update(excuse_id: int):
        body = request.get_json(silent=True) or {}
        excuses.update(excuse_id, reason=body.get("reason"), day=body.get("date"))
        audit.log_action(*current_actor(), "UPDATE_EXCUSE", {"excuse_id": excuse_id, "new_date": body.get("date")})
        return jsonify({"message": "Excuse updated successfully."})

    @app.route("/api/excuses/<int:excuse_id>", methods=["DELETE"], endpoint="excuses_delete")
    @require_role(Role.ADMIN, Role.TEACHER)
    def excuses_delete(excuse_id: int):
        excuses.delete(excuse_id)
        audit.log_action(*current_actor(), "DELETE_EXCUSE", {"excuse_id": excuse_id})
        return jsonify({"message": "Excuse deleted successfully."})

    # -------- Student self-service --------
    @app.route("/api/student/excuses", methods=["GET"], endpoint="student_excuses")
    @require_role(Role.STUDENT)
    def student_excuses():
        rows = excuses.list_for_user(current_user()["id"])
        return jsonify({"success": True, "data": [e.to_dict() for e in rows]})

    @app.route("/api/student/excuse", methods=["POST"], endpoint="student_excuse_submit")
    @require_role(Role.STUDENT)
    def student_excuse_submit():
        body = request.get_json(silent=True) or {}
        excuses.submit(
            user_id=current_user()["id"],
            day=body.get("date"),
            reason=body.get("reason"),
            today=now_local().date(),
        )
        return jsonify({"message": "Excuse submitted or updated successfully."}), 201
