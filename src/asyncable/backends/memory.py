"""In-memory backend that records jobs instead of delivering them.

Meant for tests and local development: inspect ``backend.jobs`` to assert on
what was enqueued, then ``drain()`` to run everything through the worker
adapter. Payloads go through a real encode/decode round trip, so what a test
sees is exactly what a worker would receive.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from threading import RLock
from typing import TYPE_CHECKING, Any

from .. import serialization
from ..exceptions import EncodeError
from ..payload import PERFORM_SPLIT_JOB, JobSpec
from ..worker import perform_payload, perform_split
from .base import BaseJobBackend, Delay, Timestamp, delay_seconds, epoch_seconds
from .decorators import job_backend

if TYPE_CHECKING:  # pragma: no cover
    from ..app import Asyncable

logger = logging.getLogger(__name__)

BACKEND_NAME = "memory"


@dataclass
class Job:
    id: str
    job: str
    args: list[Any]
    options: dict[str, Any] = field(default_factory=dict)
    queue: str | None = None
    at: float | None = None
    enqueued_at: float = field(default_factory=time.time)

    @property
    def scheduled(self) -> bool:
        return self.at is not None


@job_backend(BACKEND_NAME)
class InMemoryBackend(BaseJobBackend):
    def __init__(self, *, default_queue: str = "default") -> None:
        self.default_queue = default_queue
        self._jobs: list[Job] = []
        self._lock = RLock()

    def default_options(self) -> Mapping[str, Any]:
        return {"queue": self.default_queue, "retry": True}

    def encode(self, payload: Sequence[Any]) -> bytes:
        try:
            return serialization.dumps(list(payload))
        except (TypeError, ValueError) as exc:
            raise EncodeError(str(exc)) from exc

    def enqueue_now(self, job: JobSpec, payload: Sequence[Any]) -> str:
        return self._push(job, payload, at=None)

    def enqueue_after(self, job: JobSpec, delay: Delay, payload: Sequence[Any]) -> str:
        return self._push(job, payload, at=time.time() + delay_seconds(delay))

    def enqueue_at(self, job: JobSpec, timestamp: Timestamp, payload: Sequence[Any]) -> str:
        return self._push(job, payload, at=epoch_seconds(timestamp))

    def _push(self, job: JobSpec, payload: Sequence[Any], *, at: float | None) -> str:
        data = self.encode(payload)
        record = Job(
            id=uuid.uuid4().hex,
            job=job.name,
            args=serialization.loads(data),
            options=dict(job.options),
            queue=job.options.get("queue") or self.default_queue,
            at=at,
        )
        with self._lock:
            self._jobs.append(record)
        logger.debug("recorded job %s on queue %s (at=%s)", record.id, record.queue, at)
        return record.id

    # ---------- Test helpers ----------
    @property
    def jobs(self) -> list[Job]:
        with self._lock:
            return list(self._jobs)

    def jobs_for(self, queue: str) -> list[Job]:
        return [j for j in self.jobs if j.queue == queue]

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()

    def perform_next(self, *, app: "Asyncable | None" = None) -> Any:
        with self._lock:
            if not self._jobs:
                raise LookupError("no jobs to perform")
            record = self._jobs.pop(0)
        return self._run(record, app)

    def drain(self, *, app: "Asyncable | None" = None) -> list[Any]:
        """Run every recorded job (including ones enqueued while draining) in order."""
        results: list[Any] = []
        while True:
            with self._lock:
                if not self._jobs:
                    return results
            results.append(self.perform_next(app=app))

    @staticmethod
    def _run(record: Job, app: "Asyncable | None") -> Any:
        if record.job == PERFORM_SPLIT_JOB.name:
            return perform_split(*record.args, app=app)
        return perform_payload(record.args, app=app)
