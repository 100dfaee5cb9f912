from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.guards import require_role
from ..common.validators import optional_int
from ..core.enums import Role
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/audit-logs", methods=["GET"], endpoint="audit_logs")
    @require_role(Role.ADMIN)
    def audit_logs():
        page = optional_int(request.args.get("page")) or 1
        return jsonify({"success": True, "data": container.audit.list_page(page)})
