from __future__ import annotations

import logging

from flask import Flask, jsonify
from mysql.connector.errors import IntegrityError
from werkzeug.exceptions import HTTPException

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"error": str(e)}), e.status_code

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(e: IntegrityError):
        logger.warning("Integrity error: %s", e)
        return jsonify({"error": "A record with this identifier already exists."}), 409

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        # Full trace stays server-side
        logger.exception("Unhandled error")
        return jsonify({"error": "An internal server error occurred."}), 500
