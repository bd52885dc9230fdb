from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .config import get_settings_module
from .container import Container, build_container
from .core.exceptions import (
    AggregationPendingError,
    DomainError,
    InvalidInterval,
    StateConflictError,
    StorageError,
    ValidationError,
)
from .database.bootstrap import apply_schema, ensure_demo_employees, list_tables
from .summaries.controller import register as register_summaries

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    @app.errorhandler(InvalidInterval)
    def _bad_request(exc: DomainError):
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), 400

    @app.errorhandler(StateConflictError)
    def _conflict(exc: StateConflictError):
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), 409

    @app.errorhandler(AggregationPendingError)
    def _aggregation_pending(exc: AggregationPendingError):
        body = {
            "error": type(exc).__name__,
            "message": str(exc),
            "employee_id": exc.employee_id,
            "date": exc.work_date.isoformat(),
        }
        return jsonify(body), 202

    @app.errorhandler(StorageError)
    def _storage(exc: StorageError):
        return jsonify({"error": type(exc).__name__, "message": "Storage unavailable, please retry"}), 503


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_employees(db_config)
            logger.info("demo employees ready")

        container = build_container(
            db_config=db_config,
            timezone=getattr(settings, "TIMEZONE", None),
            regular_cap_hours=float(getattr(settings, "REGULAR_CAP_HOURS", 9)),
        )

    _register_error_handlers(app)
    register_attendance(app, container)
    register_summaries(app, container)

    return app
