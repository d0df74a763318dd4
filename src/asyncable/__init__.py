"""
asyncable: run class-level methods now, or later on a job queue.

A call on an opted-in class is captured as (target name, method name,
arguments), validated for serializability and handed to a job backend. A
worker later resolves the stored name through the app's target registry and
invokes the method.

Entry points:
-------------
- `AsyncableMixin` + `@asyncable`: ``Mailer.run_async().deliver(42)``
- `@asyncable(intercept=True)` / `@deferrable`: calls return a `DeferredCall`
  that can be forced in-process or enqueued (``handle.enqueue_after(60)``)
- `capture(Mailer).invoke("deliver", 42)`: tagged `Immediate` / `Deferred` result
- `asyncable.worker.perform`: the worker-side execution adapter

Backends live in `asyncable.backends` (immediate, memory, celery); errors in
`asyncable.exceptions`; the Django integration in `asyncable.contrib.django`.
"""

from importlib.metadata import PackageNotFoundError, version

from ._state import current_app, get_current_app
from .app import Asyncable
from .capture import (
    AsyncableMixin,
    CallBuilder,
    Deferred,
    DeferredCall,
    Immediate,
    SchedulingProxy,
    asyncable,
    capture,
    deferrable,
    install_interception,
)
from .conf import Configuration
from .worker import perform, perform_payload, perform_split

try:
    __version__ = version("asyncable")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "Asyncable",
    "AsyncableMixin",
    "CallBuilder",
    "Configuration",
    "Deferred",
    "DeferredCall",
    "Immediate",
    "SchedulingProxy",
    "asyncable",
    "capture",
    "current_app",
    "deferrable",
    "get_current_app",
    "install_interception",
    "perform",
    "perform_payload",
    "perform_split",
]
