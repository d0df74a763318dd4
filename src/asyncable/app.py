# asyncable/app.py
"""A compact, explicit asyncable application object.

An app bundles everything a dispatch reads:

- ``settings``  -> layered raw settings (package defaults, mappings, objects, env)
- ``conf``      -> the derived :class:`~asyncable.conf.Configuration`
- ``backend``   -> the job backend jobs are submitted to
- ``registry``  -> target names workers resolve payloads against

Lifecycle:

1. construct   -> ``Asyncable("myproj")`` reads ``ASYNCABLE_CONFIG_MODULE`` and ``ASYNCABLE_*`` env
2. configure   -> ``configure()``/``config_from_object()``/``use_backend()`` during setup only
3. register    -> ``@app.register`` or ``@asyncable`` on target classes
4. dispatch    -> capture layer reads ``conf``/``backend``/``registry``
5. close       -> clears registry and recorded jobs; drops the app if it is current
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from ._state import peek_current_app, push_current_app, reset_current_app, set_current_app
from .backends import BaseJobBackend, resolve_backend
from .conf import Configuration, Settings
from .conf.defaults import NAMESPACE
from .registry import TargetRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class Asyncable:
    name: str = "asyncable"
    backend: BaseJobBackend | str | None = None
    settings: Settings = field(default_factory=Settings)
    registry: TargetRegistry = field(default_factory=TargetRegistry)
    conf: Configuration = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.settings.update_from_envvar()
        self.settings.update_from_env()
        self.use_backend(self.backend if self.backend is not None else self.settings["BACKEND"])

    # ------------------------------------------------------------------
    # Current app helpers
    # ------------------------------------------------------------------
    def set_as_current(self) -> Asyncable:
        set_current_app(self)
        return self

    def as_current(self):
        return push_current_app(self)

    # ------------------------------------------------------------------
    # Configuration helpers
    # ------------------------------------------------------------------
    def use_backend(self, backend: BaseJobBackend | str) -> Asyncable:
        """Select the job backend and re-derive configuration from its defaults."""
        self.backend = resolve_backend(backend)
        self._rebuild_conf()
        logger.debug("app '%s' using backend %r", self.name, self.backend)
        return self

    def configure(self, mapping: Mapping[str, Any] | None = None, *, namespace: str | None = None, **options: Any) -> Asyncable:
        """Apply settings (``QUEUE``, ``RETRY``, ``BACKEND``, ...) and rebuild ``conf``.

        Keyword options are case-insensitive: ``configure(queue="critical")``.
        """
        before = self.settings.get("BACKEND")
        if mapping:
            self.settings.update_from_mapping(mapping, namespace=namespace)
        if options:
            self.settings.update_from_mapping(options)
        return self._settings_changed(before)

    def config_from_object(self, obj: str | Any, *, namespace: str | None = NAMESPACE) -> Asyncable:
        before = self.settings.get("BACKEND")
        self.settings.update_from_object(obj, namespace=namespace)
        return self._settings_changed(before)

    def config_from_envvar(self, envvar: str = "ASYNCABLE_CONFIG_MODULE", *, namespace: str | None = None) -> Asyncable:
        before = self.settings.get("BACKEND")
        self.settings.update_from_envvar(envvar, namespace=namespace)
        return self._settings_changed(before)

    def config_from_env(self, *, namespace: str = NAMESPACE) -> Asyncable:
        before = self.settings.get("BACKEND")
        self.settings.update_from_env(namespace=namespace)
        return self._settings_changed(before)

    def _settings_changed(self, backend_before: Any) -> Asyncable:
        backend_name = self.settings.get("BACKEND")
        if backend_name != backend_before and isinstance(backend_name, (str, BaseJobBackend)):
            return self.use_backend(backend_name)
        self._rebuild_conf()
        return self

    def _rebuild_conf(self) -> None:
        self.conf = Configuration.from_settings(self.settings.explicit(), self.backend)

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------
    def register(self, target: T | None = None, *, name: str | None = None) -> T | Callable[[T], T]:
        """Register a target class; usable bare, with a name, or as a decorator."""

        def _register(obj: T) -> T:
            self.registry.register(obj, name=name)
            return obj

        if target is None:
            return _register
        return _register(target)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------
    def close(self) -> None:
        self.registry.clear()
        clear = getattr(self.backend, "clear", None)
        if callable(clear):
            clear()
        if peek_current_app() is self:
            reset_current_app()


__all__ = ["Asyncable"]
