from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode, Tracer
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

logger = logging.getLogger(__name__)

_DEFAULT_TRACER_NAME = "asyncable"
_ALLOWED = (bool, str, bytes, int, float)


def get_tracer(name: str | None = None) -> Tracer:
    """Return an OpenTelemetry tracer for this package.

    The global SDK (exporters, sampling) is configured by the host application;
    without one the API hands back a no-op tracer.
    """
    return trace.get_tracer(name or _DEFAULT_TRACER_NAME)


def _apply_attributes(span: Span, attrs: Mapping[str, Any] | None) -> None:
    if not attrs:
        return
    for k, v in attrs.items():
        try:
            if v is None:
                continue
            if isinstance(v, _ALLOWED):
                span.set_attribute(k, v)
                continue
            if isinstance(v, Sequence) and not isinstance(v, (str, bytes)):
                cleaned = [x for x in v if isinstance(x, _ALLOWED)]
                if cleaned:
                    span.set_attribute(k, cleaned)
        except Exception:
            # tracing never breaks dispatch
            logger.debug("trace.attr.set_failed", extra={"key": k}, exc_info=True)


def _record_exception(span: Span, err: BaseException) -> None:
    try:
        span.record_exception(err)
        span.set_status(Status(StatusCode.ERROR, description=str(err)))
        span.set_attribute("exception.type", type(err).__name__)
    except Exception:
        logger.exception("trace.record_exception_failed")


@contextmanager
def job_span(
    name: str,
    *,
    attributes: Mapping[str, Any] | None = None,
    traceparent: str | None = None,
) -> Iterator[Span]:
    """Synchronous span around an enqueue or a worker-side perform.

    Usage:
        with job_span("asyncable.enqueue", attributes={"asyncable.target": "Mailer"}):
            ...

    ``traceparent`` continues a trace started in another process.
    """
    tracer = get_tracer()
    context = extract_trace(traceparent) if traceparent else None
    with tracer.start_as_current_span(name, context=context, kind=SpanKind.INTERNAL) as span:
        _apply_attributes(span, attributes)
        try:
            yield span
            span.set_attribute("ok", True)
        except Exception as e:
            span.set_attribute("ok", False)
            _record_exception(span, e)
            raise


def inject_trace() -> str | None:
    """Return the W3C ``traceparent`` of the current span, if any."""
    carrier: dict[str, str] = {}
    try:
        TraceContextTextMapPropagator().inject(carrier)
    except Exception:
        return None
    return carrier.get("traceparent")


def extract_trace(traceparent: str):
    try:
        return TraceContextTextMapPropagator().extract({"traceparent": traceparent})
    except Exception:
        return None


__all__ = ["get_tracer", "job_span", "inject_trace", "extract_trace"]
