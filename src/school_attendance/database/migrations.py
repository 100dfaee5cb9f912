"""Ordered schema migrations.

Each step is applied once and recorded in ``schema_version``. Append new steps
at the end; never edit a step that has shipped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class Migration:
    version: int
    name: str
    statements: Sequence[str]


SCHEMA_VERSION_TABLE = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INT PRIMARY KEY,
    name VARCHAR(120) NOT NULL,
    applied_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
) ENGINE=InnoDB
"""


MIGRATIONS: tuple[Migration, ...] = (
    Migration(
        1,
        "users_and_students",
        (
            """
            CREATE TABLE users (
                id INT AUTO_INCREMENT PRIMARY KEY,
                username VARCHAR(80) UNIQUE NULL,
                password VARCHAR(255) NULL,
                role ENUM('admin', 'registrar', 'teacher', 'student') NOT NULL,
                name VARCHAR(150) NOT NULL,
                reset_token VARCHAR(64) NULL,
                reset_token_expiry DATETIME NULL
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE student_details (
                user_id INT PRIMARY KEY,
                student_code VARCHAR(40) NOT NULL UNIQUE,
                age INT NOT NULL,
                gender VARCHAR(20) NOT NULL,
                CONSTRAINT fk_student_details_user FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE app_meta (
                meta_key VARCHAR(64) PRIMARY KEY,
                value INT NOT NULL DEFAULT 0
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE audit_logs (
                id INT AUTO_INCREMENT PRIMARY KEY,
                user_id INT NULL,
                username VARCHAR(80) NULL,
                action VARCHAR(64) NOT NULL,
                details TEXT NULL,
                timestamp DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
                CONSTRAINT fk_audit_user FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE SET NULL
            ) ENGINE=InnoDB
            """,
        ),
    ),
    Migration(
        2,
        "rooms_courses_enrollment",
        (
            """
            CREATE TABLE rooms (
                id INT AUTO_INCREMENT PRIMARY KEY,
                name VARCHAR(120) NOT NULL,
                room_number VARCHAR(40) NOT NULL,
                UNIQUE KEY uq_rooms_name_number (name, room_number)
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE courses (
                id INT AUTO_INCREMENT PRIMARY KEY,
                code VARCHAR(40) NOT NULL UNIQUE,
                name VARCHAR(150) NOT NULL,
                room_id INT NULL,
                start_time TIME NULL,
                end_time TIME NULL,
                days VARCHAR(40) NULL,
                CONSTRAINT fk_courses_room FOREIGN KEY (room_id) REFERENCES rooms (id) ON DELETE SET NULL
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE student_courses (
                user_id INT NOT NULL,
                course_id INT NOT NULL,
                PRIMARY KEY (user_id, course_id),
                CONSTRAINT fk_enroll_user FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
                CONSTRAINT fk_enroll_course FOREIGN KEY (course_id) REFERENCES courses (id) ON DELETE CASCADE
            ) ENGINE=InnoDB
            """,
        ),
    ),
    Migration(
        3,
        "attendance_and_sessions",
        (
            """
            CREATE TABLE attendance (
                id INT AUTO_INCREMENT PRIMARY KEY,
                user_id INT NOT NULL,
                course_id INT NOT NULL,
                date DATE NOT NULL,
                time VARCHAR(5) NOT NULL DEFAULT '--',
                status ENUM('Present', 'Late', 'Absent', 'Excused') NOT NULL,
                UNIQUE KEY uq_attendance_user_course_date (user_id, course_id, date),
                KEY ix_attendance_course_date (course_id, date),
                CONSTRAINT fk_attendance_user FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
                CONSTRAINT fk_attendance_course FOREIGN KEY (course_id) REFERENCES courses (id) ON DELETE CASCADE
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE attendance_sessions (
                id INT AUTO_INCREMENT PRIMARY KEY,
                course_id INT NOT NULL,
                date DATE NOT NULL,
                code VARCHAR(12) NOT NULL UNIQUE,
                start_time TIME NOT NULL,
                end_time TIME NULL,
                room_id INT NULL,
                created_by INT NULL,
                created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
                UNIQUE KEY uq_sessions_course_date (course_id, date),
                CONSTRAINT fk_sessions_course FOREIGN KEY (course_id) REFERENCES courses (id) ON DELETE CASCADE,
                CONSTRAINT fk_sessions_room FOREIGN KEY (room_id) REFERENCES rooms (id) ON DELETE SET NULL,
                CONSTRAINT fk_sessions_creator FOREIGN KEY (created_by) REFERENCES users (id) ON DELETE SET NULL
            ) ENGINE=InnoDB
            """,
        ),
    ),
    Migration(
        4,
        "excuses",
        (
            """
            CREATE TABLE excuses (
                id INT AUTO_INCREMENT PRIMARY KEY,
                user_id INT NOT NULL,
                date DATE NOT NULL,
                reason TEXT NOT NULL,
                status ENUM('Pending', 'Approved', 'Denied') NOT NULL DEFAULT 'Pending',
                processed_by INT NULL,
                UNIQUE KEY uq_excuses_user_date (user_id, date),
                CONSTRAINT fk_excuses_user FOREIGN KEY (user_id) REFERENCES users (id) ON DELETE CASCADE,
                CONSTRAINT fk_excuses_processor FOREIGN KEY (processed_by) REFERENCES users (id) ON DELETE SET NULL
            ) ENGINE=InnoDB
            """,
        ),
    ),
    Migration(
        5,
        "student_year_level",
        ("ALTER TABLE student_details ADD COLUMN year_level VARCHAR(20) NULL",),
    ),
    Migration(
        6,
        "registrations",
        (
            """
            CREATE TABLE student_registrations (
                id INT AUTO_INCREMENT PRIMARY KEY,
                name VARCHAR(150) NOT NULL,
                username VARCHAR(80) NOT NULL UNIQUE,
                password VARCHAR(255) NOT NULL,
                age INT NULL,
                gender VARCHAR(20) NULL,
                course_id INT NULL,
                year_level VARCHAR(20) NULL,
                timestamp DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
            ) ENGINE=InnoDB
            """,
            """
            CREATE TABLE staff_registrations (
                id INT AUTO_INCREMENT PRIMARY KEY,
                name VARCHAR(150) NOT NULL,
                username VARCHAR(80) NOT NULL UNIQUE,
                password VARCHAR(255) NOT NULL,
                role VARCHAR(20) NOT NULL,
                timestamp DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
            ) ENGINE=InnoDB
            """,
        ),
    ),
    Migration(
        7,
        "announcements",
        (
            """
            CREATE TABLE announcements (
                id INT AUTO_INCREMENT PRIMARY KEY,
                title VARCHAR(200) NOT NULL,
                content TEXT NOT NULL,
                created_by INT NULL,
                created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
                CONSTRAINT fk_announcements_author FOREIGN KEY (created_by) REFERENCES users (id) ON DELETE SET NULL
            ) ENGINE=InnoDB
            """,
        ),
    ),
)


def pending(migrations: Sequence[Migration], applied: set[int]) -> list[Migration]:
    ordered = sorted(migrations, key=lambda m: m.version)
    versions = [m.version for m in ordered]
    if len(set(versions)) != len(versions):
        raise RuntimeError(f"Duplicate migration versions: {versions}")
    return [m for m in ordered if m.version not in applied]
