from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.guards import current_actor, login_required, require_role
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    rooms = container.room_service
    courses = container.course_service
    enrollment = container.enrollment_service
    audit = container.audit

    # -------- Rooms --------
    @app.route("/api/rooms", methods=["GET"], endpoint="rooms_list")
    @login_required
    def rooms_list():
        return jsonify({"success": True, "data": [r.to_dict() for r in rooms.list_rooms()]})

    @app.route("/api/rooms/<int:room_id>/schedule", methods=["GET"], endpoint="rooms_schedule")
    @login_required
    def rooms_schedule(room_id: int):
        return jsonify({"success": True, "data": rooms.schedule(room_id)})

    @app.route("/api/rooms", methods=["POST"], endpoint="rooms_create")
    @require_role(Role.ADMIN)
    def rooms_create():
        body = request.get_json(silent=True) or {}
        room = rooms.create(name=body.get("name"), room_number=body.get("room_number"))
        audit.log_action(*current_actor(), "CREATE_ROOM", {"name": room.name, "room_number": room.room_number})
        return jsonify({"success": True, **room.to_dict()}), 201

    @app.route("/api/rooms/<int:room_id>", methods=["PUT"], endpoint="rooms_update")
    @require_role(Role.ADMIN)
    def rooms_update(room_id: int):
        body = request.get_json(silent=True) or {}
        rooms.update(room_id, name=body.get("name"), room_number=body.get("room_number"))
        audit.log_action(*current_actor(), "UPDATE_ROOM", {"id": room_id, **body})
        return jsonify({"success": True})

    @app.route("/api/rooms/<int:room_id>", methods=["DELETE"], endpoint="rooms_delete")
    @require_role(Role.ADMIN)
    def rooms_delete(room_id: int):
        rooms.delete(room_id)
        audit.log_action(*current_actor(), "DELETE_ROOM", {"id": room_id})
        return jsonify({"success": True})

    # -------- Courses --------
    @app.route("/api/courses", methods=["GET"], endpoint="courses_list")
    @login_required
    def courses_list():
        return jsonify({"success": True, "data": [c.to_dict() for c in courses.list_courses()]})

    @app.route("/api/public/courses", methods=["GET"], endpoint="courses_public")
    def courses_public():
        return jsonify({"success": True, "data": courses.public_list()})

    @app.route("/api/courses", methods=["POST"], endpoint="courses_create")
    @require_role(Role.ADMIN)
    def courses_create():
        body = request.get_json(silent=True) or {}
        course = courses.create(body)
        audit.log_action(*current_actor(), "CREATE_COURSE", course.to_dict())
        return (
            jsonify({"success": True, "id": course.course_id, "code": course.code, "name": course.name, "room_id": course.room_id}),
            201,
        )

    @app.route("/api/courses/<int:course_id>", methods=["PUT"], endpoint="courses_update")
    @require_role(Role.ADMIN)
    def courses_update(course_id: int):
        body = request.get_json(silent=True) or {}
        courses.update(course_id, body)
        audit.log_action(*current_actor(), "UPDATE_COURSE", {"id": course_id, **body})
        return jsonify({"success": True})

    @app.route("/api/courses/<int:course_id>", methods=["DELETE"], endpoint="courses_delete")
    @require_role(Role.ADMIN)
    def courses_delete(course_id: int):
        courses.delete(course_id)
        audit.log_action(*current_actor(), "DELETE_COURSE", {"id": course_id})
        return jsonify({"success": True})

    # -------- Enrollment --------
    @app.route("/api/courses/<int:course_id>/students", methods=["GET"], endpoint="courses_students")
    @require_role(Role.ADMIN, Role.TEACHER)
    def courses_students(course_id: int):
        return jsonify({"success": True, "data": enrollment.roster(course_id, search=request.args.get("search", ""))})

    @app.route("/api/courses/<int:course_id>/enroll", methods=["POST"], endpoint="courses_enroll")
    @require_role(Role.ADMIN, Role.TEACHER)
    def courses_enroll(course_id: int):
        student_id = (request.get_json(silent=True) or {}).get("student_id")
        enrollment.enroll(course_id, student_id)
        audit.log_action(*current_actor(), "ENROLL_STUDENT", {"course_id": course_id, "student_id": student_id})
        return jsonify({"success": True})

    @app.route("/api/courses/<int:course_id>/unenroll", methods=["POST"], endpoint="courses_unenroll")
    @require_role(Role.ADMIN, Role.TEACHER)
    def courses_unenroll(course_id: int):
        student_id = (request.get_json(silent=True) or {}).get("student_id")
        enrollment.unenroll(course_id, student_id)
        audit.log_action(*current_actor(), "UNENROLL_STUDENT", {"course_id": course_id, "student_id": student_id})
        return jsonify({"success": True})
