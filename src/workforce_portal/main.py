from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .common.log import configure_logging
from .common.responses import ok, register_error_handlers
from .companies.controller import register as register_companies
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .employees.controller import register as register_employees
from .files.controller import register as register_files
from .onboarding.controller import register as register_onboarding

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None)

    configure_logging(debug=app.config["DEBUG"], level=getattr(settings, "LOG_LEVEL", None))
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    CORS(app, origins=getattr(settings, "CORS_ORIGINS", []), supports_credentials=True)
    register_error_handlers(app)

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        container = build_container(db_config=db_config, settings=settings)
    app.extensions["workforce_portal.container"] = container

    @app.get("/health", endpoint="health")
    def health():
        return ok({"status": "ok"})

    @app.get("/api", endpoint="api_index")
    def api_index():
        return ok(
            {
                "name": "Workforce Portal API",
                "resources": [
                    "/api/auth",
                    "/api/company",
                    "/api/company-settings",
                    "/api/employees",
                    "/api/onboarding",
                    "/api/files",
                    "/api/attendance",
                ],
            }
        )

    register_auth(app, container)
    register_companies(app, container)
    register_employees(app, container)
    register_files(app, container)
    register_onboarding(app, container)
    register_attendance(app, container)

    return app
