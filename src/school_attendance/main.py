from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .config import get_settings_module
from .common.errors import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_migrations, ensure_default_staff, list_tables
from .attendance.sweep import AutoAbsentScheduler
from .announcements.controller import register as register_announcements
from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .courses.controller import register as register_courses
from .excuses.controller import register as register_excuses
from .registrations.controller import register as register_registrations
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger("school_attendance")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    # Request lines and scheduler chatter stay at warning level
    logging.getLogger("werkzeug").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["PUBLIC_BASE_URL"] = getattr(settings, "PUBLIC_BASE_URL", "http://localhost:5000")
    app.config["SESSION_COOKIE_HTTPONLY"] = True
    app.permanent_session_lifetime = timedelta(hours=int(getattr(settings, "SESSION_LIFETIME_HOURS", 24)))

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        container = build_container(
            db_config=db_config,
            late_grace_minutes=int(getattr(settings, "LATE_GRACE_MINUTES", 15)),
            reset_ttl_minutes=int(getattr(settings, "PASSWORD_RESET_TTL_MINUTES", 60)),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            applied = apply_migrations(container.conn)
            ensure_default_staff(container.conn)
            logger.info("Schema ready (applied=%s, tables=%d)", applied, len(list_tables(container.conn)))

    app.extensions["container"] = container

    if container.auth_service.needs_setup():
        logger.warning("No admin user found; POST /api/setup to create one")

    register_error_handlers(app)
    register_users(app, container)
    register_students(app, container)
    register_courses(app, container)
    register_attendance(app, container)
    register_excuses(app, container)
    register_registrations(app, container)
    register_announcements(app, container)
    register_audit(app, container)

    if bool(getattr(settings, "AUTO_ABSENT_ENABLED", False)):
        scheduler = AutoAbsentScheduler(
            container.auto_absent_sweep,
            interval_minutes=int(getattr(settings, "AUTO_ABSENT_INTERVAL_MINUTES", 15)),
        )
        scheduler.start()
        app.extensions["auto_absent_scheduler"] = scheduler

    return app
