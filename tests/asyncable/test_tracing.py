import pytest

from asyncable.tracing import extract_trace, inject_trace, job_span


def test_job_span_yields_and_reraises():
    with job_span("asyncable.test", attributes={"asyncable.target": "T", "skip": None, "list": [1, object()]}) as span:
        assert span is not None

    with pytest.raises(KeyError):
        with job_span("asyncable.test"):
            raise KeyError("x")


def test_inject_without_active_span_returns_none():
    assert inject_trace() is None


def test_job_span_accepts_foreign_traceparent():
    traceparent = "00-4bf92f3577b34da6a3ce929d0e0e4736-00f067aa0ba902b7-01"

    assert extract_trace(traceparent) is not None
    with job_span("asyncable.perform", traceparent=traceparent):
        pass
