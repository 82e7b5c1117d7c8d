"""Utilities for declaratively registering application modules.

Each blueprint/module is described with metadata so that module discovery and
registration can be automated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from flask import Blueprint, Flask
from werkzeug.utils import import_string


@dataclass(frozen=True)
class ModuleDefinition:
    """Describe how a blueprint-backed module is registered with the app."""

    import_path: str
    attribute: str
    url_prefix: Optional[str] = None
    version: str = "1.0"
    setup_hook: Optional[str] = "setup_module"

    def load_module(self):
        return import_string(self.import_path)

    def load_blueprint(self) -> Blueprint:
        """Import and return the blueprint described by this definition."""

        module = self.load_module()
        blueprint = getattr(module, self.attribute, None)
        if not isinstance(blueprint, Blueprint):
            raise TypeError(
                "Expected attribute '%s' in '%s' to be a Flask Blueprint, got %r instead"
                % (self.attribute, self.import_path, type(blueprint))
            )
        return blueprint


def register_modules(app: Flask, modules: Sequence[ModuleDefinition]) -> None:
    """Run each module's setup hook, then register its blueprint."""

    for module in modules:
        if module.setup_hook:
            setup = getattr(module.load_module(), module.setup_hook, None)
            if callable(setup):
                setup(app)
        blueprint = module.load_blueprint()
        app.register_blueprint(blueprint, url_prefix=module.url_prefix)
        app.logger.debug(
            "Registered module %s (version %s) at prefix %s",
            module.import_path,
            module.version,
            module.url_prefix or "<root>",
        )


def register_default_modules(app: Flask) -> None:
    """Convenience helper that registers the built-in Quizsync modules."""

    register_modules(app, DEFAULT_MODULES)


DEFAULT_MODULES: Iterable[ModuleDefinition] = (
    ModuleDefinition("quizsync_app.modules.display", "blueprint", url_prefix="/display", version="1.0"),
)
