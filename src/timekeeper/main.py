from __future__ import annotations

import logging

from dotenv import load_dotenv
from flask import Flask

from .common.logging_setup import configure_logging
from .config import get_settings_module, load_settings
from .container import build_container
from .database.bootstrap import apply_schema, list_tables
from .payroll.controller import register as register_payroll
from .timeentries.controller import register as register_timeentries

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = load_settings()
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), debug=app.config["DEBUG"])
    logger.debug(
        "settings=%s db=%s@%s:%s/%s",
        get_settings_module(),
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(db_config=db_config, payroll=getattr(settings, "PAYROLL", None))

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(container.conn)
        logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))

    register_timeentries(app, container)
    register_payroll(app, container)

    return app
