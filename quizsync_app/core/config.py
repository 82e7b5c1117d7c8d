# File: quizsync_app/core/config.py
# Core Infrastructure Layer: application configuration

import os
from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    """Quizsync application configuration."""

    SECRET_KEY = os.environ.get('SECRET_KEY')
    if not SECRET_KEY:
        # Fallback for development, though env is preferred
        SECRET_KEY = 'dev-secret-key-replace-in-production'

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or None
    LOG_JSON = os.environ.get('LOG_JSON', '').strip().lower() in {'1', 'true', 'yes', 'on'}

    # Display synchronization timings (milliseconds)
    DISPLAY_TICK_MS = _env_int('DISPLAY_TICK_MS', 16)
    DISPLAY_COALESCE_MS = _env_int('DISPLAY_COALESCE_MS', 16)
    DISPLAY_UNLOCK_DELAY_MS = _env_int('DISPLAY_UNLOCK_DELAY_MS', 32)
    DISPLAY_QUIET_ZONE_MS = _env_int('DISPLAY_QUIET_ZONE_MS', 150)
    DISPLAY_SETTLE_MS = _env_int('DISPLAY_SETTLE_MS', 40)
    DISPLAY_EXPLANATION_DELAY_MS = _env_int('DISPLAY_EXPLANATION_DELAY_MS', 0)

    DISPLAY_LOADING_TEXT = os.environ.get('DISPLAY_LOADING_TEXT', 'Loading question…')
    DISPLAY_NO_EXPLANATION_TEXT = os.environ.get(
        'DISPLAY_NO_EXPLANATION_TEXT', 'No explanation available'
    )

    DISPLAY_MAX_SESSIONS = _env_int('DISPLAY_MAX_SESSIONS', 256)

    @classmethod
    def init_app(cls, app):
        """Create the log directory when file logging is enabled."""
        if cls.LOG_DIR:
            os.makedirs(cls.LOG_DIR, exist_ok=True)
