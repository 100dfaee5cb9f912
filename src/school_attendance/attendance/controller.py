from __future__ import annotations

import io

from flask import Flask, Response, jsonify, request, send_file

from ..common.datetime_utils import now_local, parse_iso_date
from ..common.guards import current_actor, current_user, login_required, require_role
from ..common.validators import optional_int
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    attendance = container.attendance_service
    audit = container.audit

    # -------- Sessions --------
    @app.route("/api/attendance/session", methods=["POST"], endpoint="attendance_open_session")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_open_session():
        body = request.get_json(silent=True) or {}
        actor_id, actor_name = current_actor()
        code = attendance.open_session(
            course_id=optional_int(body.get("course_id")),
            day=body.get("date"),
            start_time=body.get("start_time"),
            end_time=body.get("end_time") or None,
            room_id=optional_int(body.get("room_id")),
            created_by=actor_id,
        )
        audit.log_action(
            actor_id,
            actor_name,
            "CREATE_ATTENDANCE_SESSION",
            {
                "course_id": body.get("course_id"),
                "date": body.get("date"),
                "code": code,
                "room_id": body.get("room_id"),
                "end_time": body.get("end_time"),
            },
        )
        return jsonify({"success": True, "code": code})

    @app.route("/api/attendance/sessions", methods=["GET"], endpoint="attendance_sessions")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_sessions():
        return jsonify({"success": True, "data": [s.to_dict() for s in attendance.list_sessions()]})

    @app.route("/api/attendance/sessions/<int:session_id>", methods=["PUT"], endpoint="attendance_session_update")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_session_update(session_id: int):
        body = request.get_json(silent=True) or {}
        attendance.update_session(session_id, start_time=body.get("start_time"), end_time=body.get("end_time"))
        audit.log_action(
            *current_actor(),
            "UPDATE_ATTENDANCE_SESSION",
            {"session_id": session_id, "start_time": body.get("start_time"), "end_time": body.get("end_time")},
        )
        return jsonify({"success": True, "message": "Session updated."})

    @app.route("/api/attendance/sessions/<int:session_id>", methods=["DELETE"], endpoint="attendance_session_delete")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_session_delete(session_id: int):
        session = attendance.delete_session(session_id)
        audit.log_action(*current_actor(), "DELETE_ATTENDANCE_SESSION", {"session_id": session_id, "code": session.code})
        return jsonify({"success": True, "message": "Session deleted."})

    @app.route("/api/attendance/session/<code>/qr.png", methods=["GET"], endpoint="attendance_session_qr")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_session_qr(code: str):
        png = attendance.session_qr_png(code)
        return send_file(io.BytesIO(png), mimetype="image/png")

    # -------- Records --------
    @app.route("/api/attendance/<day>", methods=["GET"], endpoint="attendance_roster")
    @login_required
    def attendance_roster(day: str):
        data = attendance.roster_for(
            parse_iso_date(day),
            course_id=optional_int(request.args.get("course_id")),
            room_id=optional_int(request.args.get("room_id")),
            year_level=request.args.get("year_level") or None,
        )
        return jsonify({"success": True, "data": data})

    @app.route("/api/attendance", methods=["PUT"], endpoint="attendance_update")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_update():
        body = request.get_json(silent=True) or {}
        status = attendance.update_record(
            day=body.get("date"),
            student_code=body.get("student_code"),
            course_id=optional_int(body.get("course_id")),
            status=body.get("status"),
            session_start_time=body.get("session_start_time") or None,
        )
        audit.log_action(
            *current_actor(),
            "UPDATE_ATTENDANCE",
            {
                "student_code": body.get("student_code"),
                "date": body.get("date"),
                "status": status.value,
                "course_id": body.get("course_id"),
            },
        )
        return jsonify({"message": "Attendance updated.", "status": status.value})

    @app.route("/api/attendance/<day>/csv", methods=["GET"], endpoint="attendance_export_csv")
    @require_role(Role.ADMIN, Role.TEACHER)
    def attendance_export_csv(day: str):
        course_id = optional_int(request.args.get("course_id"))
        if course_id is None:
            raise ValidationError("Course ID is required")
        day = parse_iso_date(day).isoformat()
        body = attendance.export_csv(day, course_id)
        return Response(
            body,
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="attendance-{day}.csv"'},
        )

    @app.route("/api/dashboard-summary", methods=["GET"], endpoint="dashboard_summary")
    @login_required
    def dashboard_summary():
        return jsonify({"success": True, "data": attendance.dashboard_summary(today=now_local().date())})

    # -------- Student self-service --------
    @app.route("/api/student/attendance/mark", methods=["POST"], endpoint="student_attendance_mark")
    @require_role(Role.STUDENT)
    def student_attendance_mark():
        body = request.get_json(silent=True) or {}
        status = attendance.mark_by_code(user_id=current_user()["id"], code=body.get("code"))
        return jsonify({"success": True, "status": status.value, "message": f"Attendance marked as {status.value}."})

    @app.route("/api/student/attendance-history", methods=["GET"], endpoint="student_attendance_history")
    @require_role(Role.STUDENT)
    def student_attendance_history():
        rows = attendance.student_history(current_user()["id"])
        return jsonify({"success": True, "data": [r.to_dict() for r in rows]})

    @app.route("/api/student/summary", methods=["GET"], endpoint="student_own_summary")
    @require_role(Role.STUDENT)
    def student_own_summary():
        data = attendance.student_summary(
            current_user()["id"],
            start=request.args.get("start"),
            end=request.args.get("end"),
        )
        return jsonify({"success": True, "data": data})
