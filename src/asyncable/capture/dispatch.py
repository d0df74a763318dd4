# asyncable/capture/dispatch.py
"""
Shared validation and submission for deferred calls.

Both capture modes (scheduling proxies and deferred call handles) end up here:

1) reject callables in the arguments (`BlockNotSupportedError`)
2) look up the target's registered name (`AnonymousTargetError`)
3) fold keyword arguments into positional ones via the method signature
4) encode ``[target.method, *args]`` with the backend (`NonSerializableArgumentsError`)
5) apply configured options and submit through the backend

Steps 1-4 run before the backend's enqueue is called, so a failing call never
leaves a partially built job behind.
"""

from __future__ import annotations

import enum
import inspect
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable

from .._state import get_current_app
from ..exceptions import AnonymousTargetError, BlockNotSupportedError, EncodeError, NonSerializableArgumentsError
from ..payload import PERFORM_JOB, JobPayload
from ..tracing import job_span
from ..worker import ORIGINAL_ATTR

if TYPE_CHECKING:  # pragma: no cover
    from ..app import Asyncable

logger = logging.getLogger(__name__)

# Class attribute pinning a target to a specific app.
APP_ATTR = "__asyncable_app__"


class Mode(str, enum.Enum):
    NOW = "now"
    AFTER = "after"
    AT = "at"


def app_for(target: Any, app: "Asyncable | None" = None) -> "Asyncable":
    return app or getattr(target, APP_ATTR, None) or get_current_app()


def target_label(target: Any) -> str:
    return getattr(target, "__qualname__", None) or getattr(target, "__name__", None) or repr(target)


def wire_label(app: "Asyncable", target: Any) -> str:
    """Registered name of *target* when it has one, else its qualified name."""
    try:
        return app.registry.name_for(target)
    except AnonymousTargetError:
        return target_label(target)


def is_block(value: Any) -> bool:
    """True for functions, lambdas, bound methods, partials and other callable objects.

    Classes are callable too but are not closures; they fail encoding instead.
    """
    return callable(value) and not isinstance(value, type)


def _positional_args(
    target: Any,
    label: str,
    method_name: str,
    args: Sequence[Any],
    kwargs: Mapping[str, Any] | None,
    fn: Callable[..., Any] | None,
) -> tuple[Any, ...]:
    if not kwargs:
        return tuple(args)

    fn = fn if fn is not None else getattr(target, method_name, None)
    fn = getattr(fn, ORIGINAL_ATTR, fn)
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError) as exc:
        raise NonSerializableArgumentsError(
            label, method_name, f"keyword arguments need an introspectable signature ({exc})"
        ) from exc

    bound = signature.bind(*args, **kwargs)

    # defaults skipped before a later keyword become explicit positional values
    positional = [
        p
        for p in signature.parameters.values()
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    supplied = [i for i, p in enumerate(positional) if p.name in bound.arguments]
    if supplied:
        for param in positional[: supplied[-1]]:
            if param.name not in bound.arguments:
                bound.arguments[param.name] = param.default

    if bound.kwargs:
        raise NonSerializableArgumentsError(
            label,
            method_name,
            f"keyword-only arguments {sorted(bound.kwargs)} cannot be carried in a job payload",
        )
    return tuple(bound.args)


def prepare_payload(
    app: "Asyncable",
    target: Any,
    method_name: str,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
    *,
    fn: Callable[..., Any] | None = None,
) -> JobPayload:
    """Validate a call and build its job payload without contacting the backend."""
    for value in (*args, *(kwargs or {}).values()):
        if is_block(value):
            raise BlockNotSupportedError(wire_label(app, target), method_name, value)

    target_name = app.registry.name_for(target)
    positional = _positional_args(target, target_name, method_name, args, kwargs, fn)
    payload = JobPayload(target_name, method_name, positional)

    if app.conf.validate_arguments:
        try:
            app.backend.encode(payload.to_wire())
        except EncodeError as exc:
            raise NonSerializableArgumentsError(target_name, method_name, exc) from exc
    return payload


def submit(app: "Asyncable", payload: JobPayload, mode: Mode, schedule: Any = None) -> str:
    """Hand a prepared payload to the app's backend and return the job id."""
    if mode is not Mode.NOW and schedule is None:
        raise ValueError(f"mode {mode.value!r} requires a schedule argument")

    backend = app.backend
    options = app.conf.effective_options
    job = backend.apply_options(PERFORM_JOB, options)
    wire = payload.to_wire()

    with job_span(
        "asyncable.enqueue",
        attributes={
            "asyncable.target": payload.target_name,
            "asyncable.method": payload.method_name,
            "asyncable.mode": mode.value,
            "asyncable.queue": options.get("queue"),
            "asyncable.backend": getattr(backend, "name", type(backend).__name__),
        },
    ):
        if mode is Mode.NOW:
            job_id = backend.enqueue_now(job, wire)
        elif mode is Mode.AFTER:
            job_id = backend.enqueue_after(job, schedule, wire)
        else:
            job_id = backend.enqueue_at(job, schedule, wire)

    logger.debug("enqueued %s as %s (mode=%s, options=%s)", payload, job_id, mode.value, options)
    return job_id


def enqueue(
    target: Any,
    method_name: str,
    args: Sequence[Any] = (),
    kwargs: Mapping[str, Any] | None = None,
    *,
    mode: Mode = Mode.NOW,
    schedule: Any = None,
    app: "Asyncable | None" = None,
    fn: Callable[..., Any] | None = None,
) -> str:
    app = app_for(target, app)
    payload = prepare_payload(app, target, method_name, args, kwargs, fn=fn)
    return submit(app, payload, mode, schedule)


__all__ = ["APP_ATTR", "Mode", "app_for", "enqueue", "is_block", "prepare_payload", "submit", "target_label"]
