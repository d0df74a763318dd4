# asyncable/backends/base.py
"""
Job backend contract.

A backend is the durable queue that stores a payload and later redelivers it to
a worker. asyncable only *prepares* payloads and hands them over:

  - `enqueue_now(job, payload)`              -> job id
  - `enqueue_after(job, delay, payload)`     -> job id (delay: seconds or timedelta)
  - `enqueue_at(job, timestamp, payload)`    -> job id (timestamp: epoch seconds or datetime)
  - `apply_options(job, options)`            -> JobSpec carrying per-call overrides
  - `encode(payload)`                        -> bytes, raising `EncodeError`
  - `default_options()`                      -> the backend's own documented defaults

Persistence, scheduling, retries and worker concurrency belong to the backend.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from ..payload import JobSpec

Delay = float | int | timedelta
Timestamp = float | int | datetime


class BaseJobBackend(ABC):
    """Abstract base for job backends.

    Notes:
      - Enqueue operations MUST NOT run the job before returning unless the backend
        is explicitly inline (see `ImmediateBackend`).
      - `encode` MUST either return the full encoded payload or raise `EncodeError`;
        callers rely on it to validate before anything is submitted.
    """

    name: str = "base"

    # ---------- Public API ----------
    @abstractmethod
    def enqueue_now(self, job: JobSpec, payload: Sequence[Any]) -> str:
        ...

    @abstractmethod
    def enqueue_after(self, job: JobSpec, delay: Delay, payload: Sequence[Any]) -> str:
        ...

    @abstractmethod
    def enqueue_at(self, job: JobSpec, timestamp: Timestamp, payload: Sequence[Any]) -> str:
        ...

    @abstractmethod
    def encode(self, payload: Sequence[Any]) -> bytes:
        ...

    def apply_options(self, job: JobSpec, options: Mapping[str, Any]) -> JobSpec:
        return job.with_options(options)

    def default_options(self) -> Mapping[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"


# ---------- Schedule normalization ----------

def delay_seconds(delay: Delay) -> float:
    """Normalize a delay to seconds; negative delays mean "as soon as possible"."""
    if isinstance(delay, timedelta):
        seconds = delay.total_seconds()
    elif isinstance(delay, (int, float)) and not isinstance(delay, bool):
        seconds = float(delay)
    else:
        raise TypeError(f"delay must be seconds or a timedelta, got {type(delay).__name__}")
    return max(seconds, 0.0)


def epoch_seconds(timestamp: Timestamp) -> float:
    """Normalize a timestamp to epoch seconds. Naive datetimes are read as UTC."""
    if isinstance(timestamp, datetime):
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        return timestamp.timestamp()
    if isinstance(timestamp, (int, float)) and not isinstance(timestamp, bool):
        return float(timestamp)
    raise TypeError(f"timestamp must be epoch seconds or a datetime, got {type(timestamp).__name__}")


def utc_datetime(timestamp: Timestamp) -> datetime:
    return datetime.fromtimestamp(epoch_seconds(timestamp), tz=timezone.utc)


__all__ = ["BaseJobBackend", "Delay", "Timestamp", "delay_seconds", "epoch_seconds", "utc_datetime"]
