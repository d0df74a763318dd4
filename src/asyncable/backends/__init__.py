"""asyncable.backends package.

Job backends own persistence, scheduling and retries; asyncable only hands
them encoded payloads. Built-in backends register themselves on import:

- `ImmediateBackend` ("immediate", alias "inline"): runs jobs in-process.
- `InMemoryBackend` ("memory", aliases "fake"/"test"): records jobs for inspection.
- `CeleryBackend` ("celery"): sends jobs to Celery workers.
"""
from .base import BaseJobBackend, delay_seconds, epoch_seconds, utc_datetime
from .celery_backend import CeleryBackend
from .decorators import job_backend
from .immediate import ImmediateBackend
from .memory import InMemoryBackend, Job
from .registry import create_backend, get_backend_class, list_backend_names, register_backend, resolve_backend

__all__ = [
    "BaseJobBackend",
    "CeleryBackend",
    "ImmediateBackend",
    "InMemoryBackend",
    "Job",
    "job_backend",
    "register_backend",
    "get_backend_class",
    "create_backend",
    "resolve_backend",
    "list_backend_names",
    "delay_seconds",
    "epoch_seconds",
    "utc_datetime",
]
