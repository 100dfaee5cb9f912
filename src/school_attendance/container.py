from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .announcements.mysql_announcement_repository import MySQLAnnouncementRepository
from .announcements.service import AnnouncementService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_session_repository import MySQLSessionRepository
from .attendance.reconciliation import AttendanceReconciler
from .attendance.service import AttendanceService
from .attendance.session_codes import SessionCodeAllocator
from .attendance.sweep import AutoAbsentSweep
from .audit.mysql_audit_repository import MySQLAuditLogRepository
from .audit.service import AuditLogger
from .core.constants import DEFAULT_LATE_GRACE_MINUTES, DEFAULT_RESET_TOKEN_TTL_MINUTES
from .courses.mysql_course_repository import MySQLCourseRepository, MySQLEnrollmentRepository, MySQLRoomRepository
from .courses.service import CourseService, EnrollmentService, RoomService
from .database.connection import DBConfig, DatabaseConnection
from .excuses.mysql_excuse_repository import MySQLExcuseRepository
from .excuses.service import ExcuseService
from .registrations.mysql_registration_repository import MySQLRegistrationRepository
from .registrations.service import RegistrationService
from .students.codes import StudentCodeAllocator
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, StaffService


@dataclass(frozen=True)
class Repositories:
    users: Any
    audit_logs: Any
    students: Any
    rooms: Any
    courses: Any
    enrollments: Any
    attendance: Any
    sessions: Any
    excuses: Any
    registrations: Any
    announcements: Any


@dataclass(frozen=True)
class Container:
    """Application state built once at startup and shared by every request."""

    conn: Optional[DatabaseConnection]
    repos: Repositories

    audit: AuditLogger
    auth_service: AuthService
    staff_service: StaffService
    student_service: StudentService
    room_service: RoomService
    course_service: CourseService
    enrollment_service: EnrollmentService
    reconciler: AttendanceReconciler
    attendance_service: AttendanceService
    auto_absent_sweep: AutoAbsentSweep
    excuse_service: ExcuseService
    registration_service: RegistrationService
    announcement_service: AnnouncementService


def assemble(
    repos: Repositories,
    *,
    conn: Optional[DatabaseConnection] = None,
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    reset_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES,
    student_codes: StudentCodeAllocator | None = None,
    session_codes: SessionCodeAllocator | None = None,
) -> Container:
    """Wire services onto a set of repositories (MySQL in production, in-memory in tests)."""
    student_codes = student_codes or StudentCodeAllocator()
    reconciler = AttendanceReconciler(repos.attendance)

    attendance_service = AttendanceService(
        repos.attendance,
        repos.sessions,
        repos.courses,
        repos.students,
        repos.excuses,
        reconciler=reconciler,
        strategy_factory=AttendanceStrategyFactory(grace_minutes=int(late_grace_minutes)),
        session_codes=session_codes or SessionCodeAllocator(),
    )

    return Container(
        conn=conn,
        repos=repos,
        audit=AuditLogger(repos.audit_logs),
        auth_service=AuthService(repos.users, reset_ttl_minutes=reset_ttl_minutes),
        staff_service=StaffService(repos.users, reset_ttl_minutes=reset_ttl_minutes),
        student_service=StudentService(
            repos.students,
            repos.users,
            repos.attendance,
            repos.excuses,
            codes=student_codes,
        ),
        room_service=RoomService(repos.rooms, repos.courses),
        course_service=CourseService(repos.courses),
        enrollment_service=EnrollmentService(repos.enrollments, repos.courses),
        reconciler=reconciler,
        attendance_service=attendance_service,
        auto_absent_sweep=AutoAbsentSweep(repos.courses, repos.sessions, reconciler),
        excuse_service=ExcuseService(repos.excuses),
        registration_service=RegistrationService(repos.registrations, codes=student_codes),
        announcement_service=AnnouncementService(repos.announcements),
    )


def build_container(
    *,
    db_config: dict,
    late_grace_minutes: int = DEFAULT_LATE_GRACE_MINUTES,
    reset_ttl_minutes: int = DEFAULT_RESET_TOKEN_TTL_MINUTES,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_dict(db_config))

    repos = Repositories(
        users=MySQLUserRepository(conn),
        audit_logs=MySQLAuditLogRepository(conn),
        students=MySQLStudentRepository(conn),
        rooms=MySQLRoomRepository(conn),
        courses=MySQLCourseRepository(conn),
        enrollments=MySQLEnrollmentRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        sessions=MySQLSessionRepository(conn),
        excuses=MySQLExcuseRepository(conn),
        registrations=MySQLRegistrationRepository(conn),
        announcements=MySQLAnnouncementRepository(conn),
    )
    return assemble(
        repos,
        conn=conn,
        late_grace_minutes=late_grace_minutes,
        reset_ttl_minutes=reset_ttl_minutes,
    )
