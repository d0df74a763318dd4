# asyncable/tasks.py
"""
Celery worker entrypoints for asyncable jobs.

Import this module in the Celery worker (``app.autodiscover_tasks`` or
``imports = ["asyncable.tasks"]``) together with the modules that register the
async targets. Both payload shapes are served:

- ``asyncable.perform``        -> ``["Target.method", *args]``
- ``asyncable.perform_split``  -> ``["Target", "method", *args]``
"""

from __future__ import annotations

import logging
from typing import Any

from celery import shared_task

from .worker import perform, perform_split

logger = logging.getLogger(__name__)


def _header(request: Any, key: str) -> Any:
    # Protocol 2 exposes custom headers on the request; eager runs keep them nested.
    value = request.get(key)
    if value is None:
        value = (getattr(request, "headers", None) or {}).get(key)
    return value


def _retry_or_raise(task: Any, exc: Exception) -> None:
    retry = _header(task.request, "asyncable_retry")
    if retry is None or retry is False or retry == 0:
        raise exc
    max_retries = task.max_retries if retry is True else int(retry)
    raise task.retry(exc=exc, max_retries=max_retries)


@shared_task(name="asyncable.perform", bind=True)
def perform_job(self, callable_path: str, *args: Any) -> Any:
    traceparent = _header(self.request, "traceparent")
    try:
        return perform(callable_path, *args, traceparent=traceparent)
    except Exception as exc:
        logger.exception("job '%s' failed", callable_path)
        _retry_or_raise(self, exc)


@shared_task(name="asyncable.perform_split", bind=True)
def perform_split_job(self, target_name: str, method_name: str, *args: Any) -> Any:
    traceparent = _header(self.request, "traceparent")
    try:
        return perform_split(target_name, method_name, *args, traceparent=traceparent)
    except Exception as exc:
        logger.exception("job '%s.%s' failed", target_name, method_name)
        _retry_or_raise(self, exc)


__all__ = ["perform_job", "perform_split_job"]
