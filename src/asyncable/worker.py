# asyncable/worker.py
"""
Worker-side job execution adapter.

A job backend calls one of these entry points when a deferred job fires:

    perform("Mailer.deliver", 42, "welcome")          # compact payload
    perform_split("Mailer", "deliver", 42, "welcome")  # separate-field payload
    perform_payload(["Mailer.deliver", 42, "welcome"])

The target name is resolved through the app's registry and the method is
invoked with the stored arguments. The method's return value is handed back to
the backend (most discard it). Any error raised by the method propagates
unchanged so the backend's retry/dead-letter policy sees it.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Callable

from asgiref.sync import async_to_sync

from ._state import get_current_app
from .exceptions import TargetNotFoundError, UnresolvableTargetError
from .payload import JobPayload
from .tracing import job_span

if TYPE_CHECKING:  # pragma: no cover
    from .app import Asyncable

logger = logging.getLogger(__name__)

# Set on interception wrappers so workers can reach the undeferred callable.
ORIGINAL_ATTR = "__asyncable_original__"


def resolve_callable(target: Any, method_name: str, *, raw: str) -> Callable[..., Any]:
    """Return the live, undeferred callable for ``target.method_name``."""
    if not method_name.isidentifier() or method_name.startswith("_"):
        raise UnresolvableTargetError(raw, f"{method_name!r} is not a public method name")
    try:
        fn = getattr(target, method_name)
    except AttributeError as exc:
        raise UnresolvableTargetError(raw, exc) from exc
    fn = getattr(fn, ORIGINAL_ATTR, fn)
    if not callable(fn):
        raise UnresolvableTargetError(raw, f"{method_name!r} is not callable")
    return fn


def _invoke(payload: JobPayload, *, raw: str, app: "Asyncable | None", traceparent: str | None = None) -> Any:
    app = app or get_current_app()
    with job_span(
        "asyncable.perform",
        attributes={
            "asyncable.target": payload.target_name,
            "asyncable.method": payload.method_name,
            "asyncable.args.count": len(payload.args),
        },
        traceparent=traceparent,
    ):
        try:
            target = app.registry.resolve(payload.target_name)
        except TargetNotFoundError as exc:
            raise UnresolvableTargetError(raw, exc) from exc

        fn = resolve_callable(target, payload.method_name, raw=raw)
        logger.debug("performing %s", payload)
        if inspect.iscoroutinefunction(fn):
            return async_to_sync(fn)(*payload.args)
        return fn(*payload.args)


def perform(callable_path: str, *args: Any, app: "Asyncable | None" = None, traceparent: str | None = None) -> Any:
    """Execute a compact ``"Target.method"`` job."""
    try:
        payload = JobPayload.from_wire([callable_path, *args])
    except ValueError as exc:
        raise UnresolvableTargetError(str(callable_path), exc) from exc
    return _invoke(payload, raw=callable_path, app=app, traceparent=traceparent)


def perform_split(
    target_name: str,
    method_name: str,
    *args: Any,
    app: "Asyncable | None" = None,
    traceparent: str | None = None,
) -> Any:
    """Execute a job stored in the separate-field ``[target, method, *args]`` shape."""
    raw = f"{target_name}.{method_name}"
    try:
        payload = JobPayload.from_fields(target_name, method_name, *args)
    except ValueError as exc:
        raise UnresolvableTargetError(raw, exc) from exc
    return _invoke(payload, raw=raw, app=app, traceparent=traceparent)


def perform_payload(raw: Sequence[Any], *, app: "Asyncable | None" = None) -> Any:
    """Execute a decoded wire payload ``["Target.method", *args]``."""
    if isinstance(raw, (str, bytes)) or not raw:
        raise UnresolvableTargetError(repr(raw), "job payload must be a non-empty list")
    return perform(raw[0], *raw[1:], app=app)


__all__ = ["perform", "perform_split", "perform_payload", "resolve_callable", "ORIGINAL_ATTR"]
