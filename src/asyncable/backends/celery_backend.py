# asyncable/backends/celery_backend.py
"""
Celery job backend.

Jobs are sent by task *name* (``asyncable.perform``) so the enqueuing process
does not need the worker tasks imported. Dispatch options travel as follows:

- ``queue``      -> ``queue``
- ``pool``       -> ``routing_key``
- ``retry``, ``dead``, ``backtrace``, ``tags`` -> ``asyncable_*`` message headers
  read by the worker task in :mod:`asyncable.tasks`

The current trace context is injected as a ``traceparent`` header so the worker
continues the same trace.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

from celery import Celery
from celery import current_app as current_celery_app
from kombu.utils import json as kombu_json

from ..exceptions import EncodeError
from ..payload import JobSpec
from ..serialization import assert_jsonable
from ..tracing import inject_trace
from .base import BaseJobBackend, Delay, Timestamp, delay_seconds, utc_datetime
from .decorators import job_backend

logger = logging.getLogger(__name__)

BACKEND_NAME = "celery"

# Types kombu's JSON serializer round-trips on top of plain JSON.
KOMBU_JSON_TYPES: tuple[type, ...] = (datetime, date, time, Decimal, uuid.UUID)

HEADER_OPTIONS = ("retry", "dead", "backtrace", "tags")


@job_backend(BACKEND_NAME)
class CeleryBackend(BaseJobBackend):
    """Celery backend to enqueue asyncable jobs."""

    def __init__(self, app: Celery | None = None) -> None:
        self._celery_app = app

    @property
    def celery_app(self) -> Celery:
        return self._celery_app or current_celery_app

    def default_options(self) -> Mapping[str, Any]:
        queue = self.celery_app.conf.task_default_queue or "celery"
        return {"queue": queue, "retry": True}

    def encode(self, payload: Sequence[Any]) -> bytes:
        try:
            assert_jsonable(list(payload), extra_types=KOMBU_JSON_TYPES)
            return kombu_json.dumps(list(payload)).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise EncodeError(str(exc)) from exc

    def enqueue_now(self, job: JobSpec, payload: Sequence[Any]) -> str:
        return self._send(job, payload)

    def enqueue_after(self, job: JobSpec, delay: Delay, payload: Sequence[Any]) -> str:
        return self._send(job, payload, countdown=delay_seconds(delay))

    def enqueue_at(self, job: JobSpec, timestamp: Timestamp, payload: Sequence[Any]) -> str:
        return self._send(job, payload, eta=utc_datetime(timestamp))

    def _send(
        self,
        job: JobSpec,
        payload: Sequence[Any],
        *,
        countdown: float | None = None,
        eta: datetime | None = None,
    ) -> str:
        options = dict(job.options)
        headers = {f"asyncable_{key}": options[key] for key in HEADER_OPTIONS if key in options}

        traceparent = inject_trace()
        if traceparent:
            headers["traceparent"] = traceparent

        send_kwargs: dict[str, Any] = {"args": list(payload), "headers": headers}
        if options.get("queue"):
            send_kwargs["queue"] = options["queue"]
        if options.get("pool"):
            send_kwargs["routing_key"] = options["pool"]
        if countdown is not None:
            send_kwargs["countdown"] = countdown
        if eta is not None:
            send_kwargs["eta"] = eta

        result = self.celery_app.send_task(job.name, **send_kwargs)
        logger.debug("sent %s to celery as %s (queue=%s)", job.name, result.id, send_kwargs.get("queue"))
        return result.id
