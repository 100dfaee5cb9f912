from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.guards import current_actor, require_role
from ..core.enums import Role
from ..container import Container
from .service import PENDING_MESSAGE


def register(app: Flask, container: Container) -> None:
    registrations = container.registration_service
    audit = container.audit

    @app.route("/api/student-signup", methods=["POST"], endpoint="student_signup")
    def student_signup():
        registrations.submit_student(request.get_json(silent=True) or {})
        return jsonify({"success": True, "message": PENDING_MESSAGE}), 201

    @app.route("/api/student-registrations", methods=["GET"], endpoint="student_registrations")
    @require_role(Role.ADMIN)
    def student_registrations():
        return jsonify({"success": True, "data": [r.to_dict() for r in registrations.list_students()]})

    @app.route("/api/student-registrations/<int:registration_id>/approve", methods=["POST"], endpoint="student_registration_approve")
    @require_role(Role.ADMIN)
    def student_registration_approve(registration_id: int):
        code = registrations.approve_student(registration_id)
        audit.log_action(
            *current_actor(), "APPROVE_REGISTRATION", {"registration_id": registration_id, "new_student_code": code}
        )
        return jsonify({"success": True, "message": "Student registration approved."})

    @app.route("/api/student-registrations/<int:registration_id>/reject", methods=["POST"], endpoint="student_registration_reject")
    @require_role(Role.ADMIN)
    def student_registration_reject(registration_id: int):
        registrations.reject_student(registration_id)
        audit.log_action(*current_actor(), "REJECT_REGISTRATION", {"registration_id": registration_id})
        return jsonify({"success": True, "message": "Registration rejected."})

    @app.route("/api/staff-signup", methods=["POST"], endpoint="staff_signup")
    def staff_signup():
        registrations.submit_staff(request.get_json(silent=True) or {})
        return jsonify({"success": True, "message": PENDING_MESSAGE}), 201

    @app.route("/api/staff-registrations", methods=["GET"], endpoint="staff_registrations")
    @require_role(Role.ADMIN)
    def staff_registrations():
        return jsonify({"success": True, "data": [r.to_dict() for r in registrations.list_staff()]})

    @app.route("/api/staff-registrations/<int:registration_id>/approve", methods=["POST"], endpoint="staff_registration_approve")
    @require_role(Role.ADMIN)
    def staff_registration_approve(registration_id: int):
        reg = registrations.approve_staff(registration_id)
        audit.log_action(
            *current_actor(), "APPROVE_STAFF_REGISTRATION", {"registration_id": registration_id, "username": reg.username}
        )
        return jsonify({"success": True, "message": "Staff registration approved."})

    @app.route("/api/staff-registrations/<int:registration_id>/reject", methods=["POST"], endpoint="staff_registration_reject")
    @require_role(Role.ADMIN)
    def staff_registration_reject(registration_id: int):
        registrations.reject_staff(registration_id)
        audit.log_action(*current_actor(), "REJECT_STAFF_REGISTRATION", {"registration_id": registration_id})
        return jsonify({"success": True, "message": "Registration rejected."})
