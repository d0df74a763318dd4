# asyncable/contrib/django/apps.py


"""
asyncable.contrib.django.apps
=============================

Django integration for asyncable.

Responsibilities
----------------
- Apply project settings to the current asyncable app once the app registry is ready,
  so configuration is in place before the first dispatch.

Settings
--------
- ASYNCABLE (dict): ``{"QUEUE": "critical", "RETRY": 5, "BACKEND": "celery", ...}``
- ASYNCABLE_<KEY>: individual keys, e.g. ``ASYNCABLE_QUEUE = "critical"``; these win over the dict.
- ASYNCABLE_AUTOCONFIGURE (bool, default True): also readable from the environment;
  ``ASYNCABLE_AUTOCONFIGURE=0`` leaves the current app untouched.
"""

import logging
import os
import threading
from typing import Any

from django.apps import AppConfig
from django.conf import settings as dj_settings

from asyncable._state import get_current_app
from asyncable.conf.defaults import NAMESPACE
from asyncable.tracing import job_span

logger = logging.getLogger(__name__)

_configure_lock = threading.RLock()


def _coerce_bool(value: Any, default: bool = True) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    if value is None:
        return default
    return bool(value)


def _autoconfigure_enabled() -> bool:
    env_override = os.environ.get("ASYNCABLE_AUTOCONFIGURE")
    if env_override is not None:
        return _coerce_bool(env_override)
    return _coerce_bool(getattr(dj_settings, "ASYNCABLE_AUTOCONFIGURE", True))


def configure_from_django(app: Any = None) -> Any:
    """Apply ``ASYNCABLE``/``ASYNCABLE_*`` Django settings to *app* (default: the current app)."""
    app = app or get_current_app()
    with _configure_lock, job_span("asyncable.django.configure", attributes={"asyncable.app": app.name}):
        app.config_from_object(dj_settings, namespace=NAMESPACE)
    logger.debug("asyncable app '%s' configured from Django settings: %s", app.name, app.conf.effective_options)
    return app


class AsyncableConfig(AppConfig):
    """Django AppConfig for asyncable."""

    name = "asyncable.contrib.django"
    label = "asyncable"
    verbose_name = "asyncable"

    def ready(self) -> None:
        # Allow opt-out for tests and for projects that configure the app themselves
        if not _autoconfigure_enabled():
            logger.debug("ASYNCABLE_AUTOCONFIGURE disabled; skipping Django configuration")
            return
        configure_from_django()
