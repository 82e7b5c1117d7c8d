# File: quizsync_app/config.py
# Top-level import path for the application configuration.

from .core.config import Config

__all__ = ["Config"]
