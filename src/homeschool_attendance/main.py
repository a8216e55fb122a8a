from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .app_logger import setup_logging
from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .students.controller import register as register_students


def create_app(container: Optional[Container] = None) -> Flask:
    """Application factory.

    ``container`` lets callers (tests, scripts) supply already-wired services;
    otherwise the settings module selected by APP_ENV provides the database.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logger = setup_logging(getattr(settings, "LOG_LEVEL", None))

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
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

        container = build_container(db_config=db_config)

    app.extensions["homeschool_attendance"] = container

    register_error_handlers(app)
    register_students(app, container)
    register_attendance(app, container)

    return app
