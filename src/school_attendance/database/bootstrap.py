from __future__ import annotations

import logging
from typing import Sequence

from werkzeug.security import generate_password_hash

from .connection import DatabaseConnection
from .migrations import MIGRATIONS, SCHEMA_VERSION_TABLE, Migration, pending

logger = logging.getLogger(__name__)

DEFAULT_STAFF = (
    ("registrar", "Registrar User", "registrar"),
    ("teacher", "Teacher User", "teacher"),
)
DEFAULT_STAFF_PASSWORD = "1234"


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    conn = conn_factory.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{conn_factory.config.database}` "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def applied_versions(conn_factory: DatabaseConnection) -> set[int]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute(SCHEMA_VERSION_TABLE)
        cur.execute("SELECT version FROM schema_version")
        return {int(row[0]) for row in cur.fetchall()}
    finally:
        conn.close()


def apply_migrations(
    conn_factory: DatabaseConnection,
    migrations: Sequence[Migration] = MIGRATIONS,
) -> list[int]:
    """Apply every migration not yet recorded in ``schema_version``.

    Returns the versions applied by this call (empty when already current).
    """
    ensure_database_exists(conn_factory)
    todo = pending(migrations, applied_versions(conn_factory))

    done: list[int] = []
    for migration in todo:
        conn = conn_factory.connect()
        try:
            cur = conn.cursor()
            for stmt in migration.statements:
                cur.execute(stmt)
            cur.execute(
                "INSERT INTO schema_version (version, name) VALUES (%s, %s)",
                (migration.version, migration.name),
            )
            conn.commit()
        except Exception:
            # MySQL DDL auto-commits, so a failed step needs manual repair before retrying.
            conn.rollback()
            logger.error("Migration %s (%s) failed", migration.version, migration.name)
            raise
        finally:
            conn.close()
        logger.info("Applied migration %s (%s)", migration.version, migration.name)
        done.append(migration.version)
    return done


def ensure_default_staff(conn_factory: DatabaseConnection) -> None:
    """Create the default registrar and teacher accounts without overwriting existing users."""
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        password_hash = generate_password_hash(DEFAULT_STAFF_PASSWORD)
        for username, name, role in DEFAULT_STAFF:
            cur.execute(
                "INSERT IGNORE INTO users (username, password, role, name) VALUES (%s, %s, %s, %s)",
                (username, password_hash, role, name),
            )
        conn.commit()
    finally:
        conn.close()


def list_tables(conn_factory: DatabaseConnection) -> list[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
