from __future__ import annotations

import logging

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import now_local
from ..common.guards import current_actor, current_user, login_required, require_role
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    auth = container.auth_service
    staff = container.staff_service
    audit = container.audit

    def reset_link(token: str) -> str:
        base = str(app.config.get("PUBLIC_BASE_URL", "")).rstrip("/")
        return f"{base}/reset-password.html?token={token}"

    @app.route("/api/login", methods=["POST"], endpoint="api_login")
    def api_login():
        body = request.get_json(silent=True) or {}
        username = body.get("username", "")
        try:
            s_user = auth.authenticate(username, body.get("password", ""))
        except AuthenticationError:
            audit.log_action(None, username, "LOGIN_FAIL", {"reason": "Invalid credentials"})
            raise

        session.clear()
        session.permanent = True
        session["user"] = s_user.to_session()
        audit.log_action(s_user.user_id, s_user.username, "LOGIN_SUCCESS")
        return jsonify({"success": True})

    @app.route("/api/logout", methods=["POST"], endpoint="api_logout")
    def api_logout():
        if current_user():
            audit.log_action(*current_actor(), "LOGOUT")
        session.clear()
        return "", 204

    @app.route("/api/session", methods=["GET"], endpoint="api_session")
    def api_session():
        if auth.needs_setup():
            return jsonify({"authenticated": False, "needsSetup": True})
        user = current_user()
        if user:
            return jsonify({"authenticated": True, "user": user})
        return jsonify({"authenticated": False})

    @app.route("/api/setup", methods=["POST"], endpoint="api_setup")
    def api_setup():
        if not auth.needs_setup():
            raise AuthorizationError("Setup has already been completed.")
        body = request.get_json(silent=True) or {}
        if not body.get("name") or not body.get("username") or not body.get("password"):
            raise ValidationError("All fields are required.")

        auth.setup_admin(name=body["name"], username=body["username"], password=body["password"])
        audit.log_action(None, body["username"], "CREATE_ADMIN", {"name": body["name"]})
        return jsonify({"success": True, "message": "Admin account created successfully."}), 201

    @app.route("/api/request-password-reset", methods=["POST"], endpoint="api_request_password_reset")
    def api_request_password_reset():
        body = request.get_json(silent=True) or {}
        ticket = auth.request_password_reset(body.get("username"))
        if ticket:
            # No mail transport; the link goes to the server log
            logger.warning("Password reset requested for %s: %s", ticket.username, reset_link(ticket.token))
            audit.log_action(ticket.user_id, ticket.username, "REQUEST_PASSWORD_RESET")
        return jsonify(
            {"message": "If an account with that username exists, a reset link has been generated."}
        )

    @app.route("/api/reset-password", methods=["POST"], endpoint="api_reset_password")
    def api_reset_password():
        body = request.get_json(silent=True) or {}
        user = auth.reset_password(token=body.get("token"), new_password=body.get("newPassword"))
        audit.log_action(user.user_id, user.username, "COMPLETE_PASSWORD_RESET")
        return jsonify({"message": "Password has been reset successfully."})

    @app.route("/api/user/change-password", methods=["POST"], endpoint="api_change_password")
    @login_required
    def api_change_password():
        body = request.get_json(silent=True) or {}
        actor_id, actor_name = current_actor()
        try:
            auth.change_password(
                user_id=actor_id,
                current_password=body.get("currentPassword"),
                new_password=body.get("newPassword"),
            )
        except AuthorizationError:
            audit.log_action(actor_id, actor_name, "CHANGE_PASSWORD_FAIL", {"reason": "Incorrect current password"})
            raise
        audit.log_action(actor_id, actor_name, "CHANGE_PASSWORD_SUCCESS")
        return jsonify({"success": True, "message": "Password changed successfully."})

    # -------- Staff (admin) --------
    @app.route("/api/staff", methods=["GET"], endpoint="staff_list")
    @require_role(Role.ADMIN)
    def staff_list():
        return jsonify({"success": True, "data": staff.list_staff()})

    @app.route("/api/staff", methods=["POST"], endpoint="staff_create")
    @require_role(Role.ADMIN)
    def staff_create():
        body = request.get_json(silent=True) or {}
        user_id = staff.create_staff(
            name=body.get("name"),
            username=body.get("username"),
            password=body.get("password"),
            role=body.get("role"),
        )
        audit.log_action(
            *current_actor(),
            "CREATE_STAFF",
            {"new_user_id": user_id, "new_username": body.get("username"), "role": body.get("role")},
        )
        return jsonify({"id": user_id, "message": "Staff user created."}), 201

    @app.route("/api/staff/<int:user_id>", methods=["DELETE"], endpoint="staff_delete")
    @require_role(Role.ADMIN)
    def staff_delete(user_id: int):
        staff.delete_staff(user_id)
        audit.log_action(*current_actor(), "DELETE_STAFF", {"deleted_user_id": user_id})
        return jsonify({"message": "Staff user deleted successfully."})

    @app.route("/api/staff/<int:user_id>/reset-password", methods=["POST"], endpoint="staff_reset_password")
    @require_role(Role.ADMIN)
    def staff_reset_password(user_id: int):
        ticket = staff.issue_reset(user_id, now=now_local())
        link = reset_link(ticket.token)
        logger.warning("Admin-initiated password reset for %s (id=%s): %s", ticket.username, ticket.user_id, link)
        audit.log_action(
            *current_actor(),
            "ADMIN_RESET_PASSWORD",
            {"target_user_id": ticket.user_id, "target_username": ticket.username},
        )
        return jsonify({"message": f"Password reset link for {ticket.username} has been generated.", "resetLink": link})
