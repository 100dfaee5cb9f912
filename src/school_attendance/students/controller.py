from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.guards import current_actor, login_required, require_role
from ..common.validators import optional_int
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    students = container.student_service
    audit = container.audit

    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @login_required
    def students_list():
        data = students.search(
            page=optional_int(request.args.get("page")) or 1,
            limit=optional_int(request.args.get("limit")) or 10,
            search=request.args.get("search", ""),
            course_id=optional_int(request.args.get("course_id")),
            year_level=request.args.get("year_level") or None,
        )
        return jsonify({"success": True, "data": data})

    @app.route("/api/students", methods=["POST"], endpoint="students_create")
    @require_role(Role.ADMIN, Role.REGISTRAR)
    def students_create():
        body = request.get_json(silent=True) or {}
        student = students.create(body)
        audit.log_action(*current_actor(), "CREATE_STUDENT", {"student_code": student.student_code, "name": student.name})
        return jsonify({**body, "id": student.user_id, "student_code": student.student_code}), 201

    @app.route("/api/students/<code>", methods=["PUT"], endpoint="students_update")
    @require_role(Role.ADMIN, Role.REGISTRAR)
    def students_update(code: str):
        body = request.get_json(silent=True) or {}
        students.update(code, body)
        audit.log_action(*current_actor(), "UPDATE_STUDENT", {"student_code": code, "name": body.get("name")})
        return jsonify({"message": "Student updated successfully."})

    @app.route("/api/students/<code>", methods=["DELETE"], endpoint="students_delete")
    @require_role(Role.ADMIN, Role.REGISTRAR)
    def students_delete(code: str):
        students.delete(code)
        audit.log_action(*current_actor(), "DELETE_STUDENT", {"student_code": code})
        return jsonify({"message": "Student deleted successfully."})

    @app.route("/api/students/upload-csv", methods=["POST"], endpoint="students_upload_csv")
    @require_role(Role.ADMIN, Role.REGISTRAR)
    def students_upload_csv():
        upload = request.files.get("studentCsv")
        if upload is None:
            raise ValidationError("No CSV file uploaded.")

        result = students.import_csv(upload.read().decode("utf-8-sig"))
        actor_id, actor_name = current_actor()
        for created in result.created:
            audit.log_action(actor_id, actor_name, "BULK_CREATE_STUDENT", created)
        return jsonify(result.to_dict())

    @app.route("/api/students-list", methods=["GET"], endpoint="students_names")
    @require_role(Role.ADMIN, Role.TEACHER)
    def students_names():
        return jsonify({"success": True, "data": students.list_names()})

    @app.route("/api/student-history", methods=["GET"], endpoint="student_history")
    @require_role(Role.ADMIN, Role.TEACHER)
    def student_history():
        code = request.args.get("student_code")
        start, end = request.args.get("startDate"), request.args.get("endDate")
        if not code or not start or not end:
            raise ValidationError("Student, start date, and end date are required.")
        data = students.history(code, start=parse_iso_date(start), end=parse_iso_date(end))
        return jsonify({"success": True, "data": data})

    @app.route("/api/student-profile/<student_code>", methods=["GET"], endpoint="student_profile")
    @require_role(Role.ADMIN, Role.TEACHER)
    def student_profile(student_code: str):
        data = students.profile(student_code, today=now_local().date())
        return jsonify({"success": True, "data": data})

    @app.route("/api/summary/<student_code>", methods=["GET"], endpoint="student_code_summary")
    def student_code_summary(student_code: str):
        start, end = request.args.get("start"), request.args.get("end")
        if not start or not end:
            raise ValidationError("Start and end dates are required.")
        data = students.summary(student_code, start=parse_iso_date(start), end=parse_iso_date(end))
        return jsonify({"success": True, "data": data})

    @app.route("/api/public/student/<code>", methods=["GET"], endpoint="student_public_lookup")
    def student_public_lookup(code: str):
        return jsonify({"success": True, "data": students.public_lookup(code)})

    @app.route("/api/student-setup/validate", methods=["POST"], endpoint="student_setup_validate")
    def student_setup_validate():
        body = request.get_json(silent=True) or {}
        name = students.validate_setup(body.get("student_code"))
        return jsonify({"success": True, "name": name})

    @app.route("/api/student-setup/complete", methods=["POST"], endpoint="student_setup_complete")
    def student_setup_complete():
        body = request.get_json(silent=True) or {}
        students.complete_setup(
            student_code=body.get("student_code"),
            username=body.get("username"),
            password=body.get("password"),
        )
        audit.log_action(None, body.get("username"), "STUDENT_ACCOUNT_SETUP", {"student_code": body.get("student_code")})
        return jsonify({"success": True, "message": "Account setup complete! You can now log in."})
