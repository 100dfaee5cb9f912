from __future__ import annotations

import importlib

from dotenv import load_dotenv

from school_attendance.config import get_settings_module
from school_attendance.database.bootstrap import apply_migrations, ensure_default_staff, list_tables
from school_attendance.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_dict(dict(settings.DB_CONFIG)))

    applied = apply_migrations(conn)
    ensure_default_staff(conn)
    tables = list_tables(conn)
    cfg = conn.config
    print(
        f"OK: applied migrations {applied or 'none'} -> "
        f"{cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} (tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
