from __future__ import annotations

import importlib
import logging
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .cache.store import KeyValueStore
from .container import build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    EmailExists,
    LocationUnavailable,
    RemoteUnavailable,
    ValidationError,
)
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_LOCATION_MESSAGES = {
    "denied": "Location permission needed (use HTTPS or localhost).",
    "unsupported": "This device does not support geolocation.",
    "timeout": "Could not get your location in time. Please try again.",
    "invalid": "The reported location is not valid.",
}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LocationUnavailable)
    def location_unavailable(e: LocationUnavailable):
        message = _LOCATION_MESSAGES.get(e.reason, "Location is unavailable. Please try again.")
        return jsonify({"error": message, "reason": e.reason}), 422

    @app.errorhandler(DomainError)
    def domain_error(e: DomainError):
        if isinstance(e, ValidationError):
            code = 400
        elif isinstance(e, AuthenticationError):
            code = 401
        elif isinstance(e, AuthorizationError):
            code = 403
        elif isinstance(e, EmailExists):
            code = 409
        elif isinstance(e, RemoteUnavailable):
            logger.warning("remote backend unavailable (status=%s): %s", e.status_code, e)
            return jsonify({"error": "Remote backend unavailable"}), 503
        else:
            code = 400
        return jsonify({"error": str(e)}), code

    @app.errorhandler(Exception)
    def unexpected_error(e: Exception):
        if isinstance(e, HTTPException):
            return e
        logger.exception("unhandled error")
        if bool(app.config.get("DEBUG", False)):
            return jsonify({"error": f"Internal error: {e}"}), 500
        return jsonify({"error": "Internal error"}), 500


def create_app(settings: Optional[Any] = None, *, store: Optional[KeyValueStore] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    if settings is None:
        settings = importlib.import_module(get_settings_module())
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=logging.DEBUG if app.config["DEBUG"] else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info(
        "starting geo-attendance backend=%s cache=%s",
        getattr(settings, "REMOTE_BACKEND", "local"),
        getattr(settings, "CACHE_DIR", None) or "memory",
    )

    container = build_container(settings=settings, store=store)
    app.extensions["geo_attendance"] = container

    register_users(app, container)
    register_attendance(app, container)
    register_error_handlers(app)

    return app
