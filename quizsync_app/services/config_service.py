"""Runtime configuration lookups for engine settings."""

from __future__ import annotations

from typing import Any

from flask import current_app, has_app_context

from ..core.defaults import DEFAULT_APP_CONFIGS


def get_runtime_config(key: str, default: Any = None) -> Any:
    """Read a setting from current_app first, then from DEFAULT_APP_CONFIGS."""

    fallback = DEFAULT_APP_CONFIGS.get(key, default)
    if has_app_context():
        return current_app.config.get(key, fallback)
    return fallback


def collect_display_settings(mapping: Any = None) -> dict[str, Any]:
    """Return every DISPLAY_* key resolved against the defaults."""

    resolved: dict[str, Any] = {}
    for key, value in DEFAULT_APP_CONFIGS.items():
        if not key.startswith("DISPLAY_"):
            continue
        if mapping is not None:
            resolved[key] = mapping.get(key, value)
        else:
            resolved[key] = get_runtime_config(key, value)
    return resolved
