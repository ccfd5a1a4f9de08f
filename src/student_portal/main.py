from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .agendas.controller import register as register_agendas
from .appointments.controller import register as register_appointments
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.logger import configure_logging, get_logger
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .events.controller import register as register_events
from .hours.controller import register as register_hours
from .library.controller import register as register_library
from .reports.controller import register as register_reports
from .team.controller import register as register_team
from .users.controller import register as register_users
from .voting.controller import register as register_voting

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings={} db={}@{}:{}/{}",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("Schema ready (tables={})", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config)
            logger.info("Demo seed ready")

        container = build_container(db_config=db_config, settings_module=settings)

    register_error_handlers(app)

    register_users(app, container)
    register_events(app, container)
    register_library(app, container)
    register_appointments(app, container)
    register_agendas(app, container)
    register_voting(app, container)
    register_hours(app, container)
    register_reports(app, container)
    register_team(app, container)
    register_dashboard(app, container)

    return app
