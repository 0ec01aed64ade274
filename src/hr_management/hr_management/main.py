from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_mail import Mail

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .clients.controller import register as register_clients
from .common.errors import register_error_handlers
from .common.mailer import FlaskMailer
from .container import Container, build_container
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables
from .employees.controller import register as register_employees
from .integrations.controller import register as register_integrations
from .leaves.controller import register as register_leaves
from .ledger.controller import register as register_ledger
from .loans.controller import register as register_loans
from .notices.controller import register as register_notices
from .orders.controller import register as register_orders
from .shifts.controller import register as register_shifts
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

SETTINGS_KEYS = (
    "TOKEN_SECRET",
    "TIMEZONE",
    "FRONTEND_URL",
    "MAIL_SERVER",
    "MAIL_PORT",
    "MAIL_USE_TLS",
    "MAIL_USE_SSL",
    "MAIL_USERNAME",
    "MAIL_PASSWORD",
    "MAIL_DEFAULT_SENDER",
    "MAIL_BATCH_SIZE",
    "MAIL_SUPPRESS_SEND",
    "UPLOAD_FOLDER",
    "IPRN_TOKEN",
)

mail = Mail()


def create_app(container: Optional[Container] = None) -> Flask:
    """App factory; pass a prebuilt ``container`` to skip database wiring (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    for key in SETTINGS_KEYS:
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mail.init_app(app)
    register_error_handlers(app)

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "Starting with settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
            admin_email = getattr(settings, "ADMIN_EMAIL", "")
            if admin_email:
                ensure_admin_user(db_config, email=admin_email)

        container = build_container(
            db_config=db_config,
            token_secret=app.config.get("TOKEN_SECRET") or app.secret_key,
            mailer=FlaskMailer(mail, batch_size=app.config.get("MAIL_BATCH_SIZE", 50)),
            frontend_url=app.config.get("FRONTEND_URL", ""),
            timezone=app.config.get("TIMEZONE", "Asia/Dhaka"),
            upload_folder=app.config.get("UPLOAD_FOLDER", "uploads"),
        )

    register_users(app, container)
    register_employees(app, container)
    register_shifts(app, container)
    register_attendance(app, container)
    register_ledger(app, container)
    register_clients(app, container)
    register_orders(app, container)
    register_leaves(app, container)
    register_notices(app, container)
    register_loans(app, container)
    register_integrations(app, container)

    return app
