"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

import logging

from flask import Flask

from .error_handlers import register_error_handlers
from .logging_config import setup_logging
from .module_registry import register_default_modules


def configure_logging(app: Flask) -> None:
    """Configure application and package logging if no handlers are present."""

    setup_logging(
        app,
        log_level=app.config.get("LOG_LEVEL", "INFO"),
        log_dir=app.config.get("LOG_DIR"),
        json_format=bool(app.config.get("LOG_JSON")),
    )

    if app.logger.handlers:
        return

    app.logger.setLevel(logging.DEBUG if app.debug else logging.INFO)
    handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    app.logger.addHandler(handler)
    app.logger.propagate = False
    app.logger.info("Flask app logger configured successfully.")


def register_extensions(app: Flask) -> None:
    """Attach per-app engine state to ``app.extensions``."""

    from ..modules.display.services.registry import SessionRegistry

    app.extensions["display_sessions"] = SessionRegistry(
        max_sessions=int(app.config.get("DISPLAY_MAX_SESSIONS", 256))
    )


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_error_handlers(app)
    register_default_modules(app)
