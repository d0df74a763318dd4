"""Immediate backend runs jobs synchronously and inline."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from .. import serialization
from ..exceptions import EncodeError
from ..payload import JobSpec
from ..worker import perform_payload
from .base import BaseJobBackend, Delay, Timestamp, delay_seconds, epoch_seconds
from .decorators import job_backend

logger = logging.getLogger(__name__)

BACKEND_NAME = "immediate"


@job_backend(BACKEND_NAME)
class ImmediateBackend(BaseJobBackend):
    """Performs every job before returning; schedules are ignored.

    The payload still goes through encode/decode so inline runs behave like a
    worker would. Errors raised by the job propagate to the enqueuing caller.
    """

    def encode(self, payload: Sequence[Any]) -> bytes:
        try:
            return serialization.dumps(list(payload))
        except (TypeError, ValueError) as exc:
            raise EncodeError(str(exc)) from exc

    def enqueue_now(self, job: JobSpec, payload: Sequence[Any]) -> str:
        return self._run(job, payload)

    def enqueue_after(self, job: JobSpec, delay: Delay, payload: Sequence[Any]) -> str:
        logger.debug("immediate backend ignores delay of %ss for %s", delay_seconds(delay), job.name)
        return self._run(job, payload)

    def enqueue_at(self, job: JobSpec, timestamp: Timestamp, payload: Sequence[Any]) -> str:
        logger.debug("immediate backend ignores schedule at %s for %s", epoch_seconds(timestamp), job.name)
        return self._run(job, payload)

    def _run(self, job: JobSpec, payload: Sequence[Any]) -> str:
        job_id = uuid.uuid4().hex
        perform_payload(serialization.loads(self.encode(payload)))
        return job_id
