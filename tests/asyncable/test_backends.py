from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest

from asyncable import Asyncable, AsyncableMixin, asyncable
from asyncable.backends import (
    BaseJobBackend,
    CeleryBackend,
    ImmediateBackend,
    InMemoryBackend,
    create_backend,
    delay_seconds,
    epoch_seconds,
    get_backend_class,
    job_backend,
    list_backend_names,
    resolve_backend,
)
from asyncable.exceptions import BackendNotFoundError, EncodeError, NonSerializableArgumentsError
from asyncable.payload import PERFORM_JOB


# ---------------------------------------------------------------- registry


@pytest.mark.parametrize(
    "name, cls",
    [
        ("memory", InMemoryBackend),
        ("fake", InMemoryBackend),
        ("TEST", InMemoryBackend),
        ("immediate", ImmediateBackend),
        ("inline", ImmediateBackend),
        (None, ImmediateBackend),
        ("celery", CeleryBackend),
        ("celery_backend", CeleryBackend),
    ],
)
def test_backend_names_and_aliases(name, cls):
    assert get_backend_class(name) is cls


def test_unknown_backend():
    with pytest.raises(BackendNotFoundError):
        create_backend("carrier-pigeon")


def test_resolve_backend_accepts_instances():
    backend = InMemoryBackend()

    assert resolve_backend(backend) is backend
    assert isinstance(resolve_backend("memory"), InMemoryBackend)


def test_job_backend_decorator_registers():
    @job_backend("recording-test")
    class RecordingBackend(InMemoryBackend):
        pass

    assert RecordingBackend.name == "recording-test"
    assert "recording-test" in list_backend_names()
    assert isinstance(create_backend("recording-test"), RecordingBackend)


def test_job_backend_decorator_requires_backend_subclass():
    with pytest.raises(TypeError):
        job_backend("nope")(object)


# ---------------------------------------------------------------- schedules


def test_delay_seconds():
    assert delay_seconds(5) == 5.0
    assert delay_seconds(timedelta(minutes=1)) == 60.0
    assert delay_seconds(-3) == 0.0
    with pytest.raises(TypeError):
        delay_seconds(True)


def test_epoch_seconds_treats_naive_as_utc():
    naive = datetime(2030, 1, 1)
    aware = datetime(2030, 1, 1, tzinfo=timezone.utc)

    assert epoch_seconds(naive) == epoch_seconds(aware) == aware.timestamp()
    assert epoch_seconds(10) == 10.0


# ---------------------------------------------------------------- memory


def test_memory_backend_records_and_filters_by_queue():
    backend = InMemoryBackend()
    backend.enqueue_now(PERFORM_JOB.with_options({"queue": "a"}), ["T.m", 1])
    backend.enqueue_after(PERFORM_JOB, 10, ["T.m", 2])

    assert [j.args for j in backend.jobs_for("a")] == [["T.m", 1]]
    assert [j.args for j in backend.jobs_for("default")] == [["T.m", 2]]
    assert backend.jobs[1].at > backend.jobs[1].enqueued_at

    backend.clear()
    assert backend.jobs == []


def test_memory_backend_encoding_is_strict():
    with pytest.raises(EncodeError):
        InMemoryBackend().encode(["T.m", datetime(2030, 1, 1)])


def test_app_close_clears_registry_and_jobs(app, backend):
    @asyncable
    class Closing:
        @staticmethod
        def run():
            return 1

    backend.enqueue_now(PERFORM_JOB, ["Closing.run"])
    app.close()

    assert backend.jobs == []
    assert "Closing" not in app.registry


# ---------------------------------------------------------------- immediate


def test_immediate_backend_runs_inline():
    app = Asyncable("inline", backend="immediate")
    results = []

    @asyncable(app=app)
    class Inline(AsyncableMixin):
        @staticmethod
        def run(value):
            results.append(value)

    with app.as_current():
        job_id = Inline.run_async().run(1)
        Inline.run_after(60).run(2)
        app.backend.enqueue_at(PERFORM_JOB, datetime(2030, 1, 1), ["Inline.run", 3])

    assert isinstance(job_id, str) and job_id
    assert results == [1, 2, 3]


# ---------------------------------------------------------------- celery


@pytest.fixture()
def celery_app():
    from celery import Celery

    return Celery("asyncable-tests")


@pytest.fixture()
def sent(monkeypatch, celery_app):
    calls = []

    def fake_send_task(name, **kwargs):
        calls.append((name, kwargs))
        return SimpleNamespace(id=f"celery-{len(calls)}")

    monkeypatch.setattr(celery_app, "send_task", fake_send_task)
    return calls


def test_celery_backend_sends_task_with_options(celery_app, sent):
    backend = CeleryBackend(celery_app)
    job = backend.apply_options(PERFORM_JOB, {"queue": "mail", "retry": 3, "dead": False, "pool": "eu", "tags": ["x"]})

    job_id = backend.enqueue_now(job, ["Mailer.deliver", 1])

    assert job_id == "celery-1"
    name, kwargs = sent[0]
    assert name == "asyncable.perform"
    assert kwargs["args"] == ["Mailer.deliver", 1]
    assert kwargs["queue"] == "mail"
    assert kwargs["routing_key"] == "eu"
    assert kwargs["headers"]["asyncable_retry"] == 3
    assert kwargs["headers"]["asyncable_dead"] is False
    assert kwargs["headers"]["asyncable_tags"] == ["x"]
    assert "countdown" not in kwargs and "eta" not in kwargs


def test_celery_backend_schedules(celery_app, sent):
    backend = CeleryBackend(celery_app)

    backend.enqueue_after(PERFORM_JOB, timedelta(seconds=90), ["T.m"])
    backend.enqueue_at(PERFORM_JOB, 0, ["T.m"])

    assert sent[0][1]["countdown"] == 90.0
    assert sent[1][1]["eta"] == datetime(1970, 1, 1, tzinfo=timezone.utc)


def test_celery_encoding_accepts_kombu_types_only(celery_app):
    backend = CeleryBackend(celery_app)

    assert backend.encode(["T.m", Decimal("1.5"), datetime(2030, 1, 1)])
    with pytest.raises(EncodeError):
        backend.encode(["T.m", {1, 2}])


def test_celery_backend_end_to_end_dispatch(celery_app, sent):
    app = Asyncable("celery-app", backend=CeleryBackend(celery_app))
    celery_app.conf.task_default_queue = "jobs"
    app.use_backend(app.backend)

    @asyncable(app=app, intercept=True)
    class Mailer:
        @staticmethod
        def deliver(user_id):
            return user_id

    Mailer.deliver(5).enqueue_after(30)

    name, kwargs = sent[0]
    assert kwargs["args"] == ["Mailer.deliver", 5]
    assert kwargs["queue"] == "jobs"
    assert kwargs["countdown"] == 30.0
    assert kwargs["headers"]["asyncable_retry"] is True

    with pytest.raises(NonSerializableArgumentsError):
        Mailer.deliver(object()).enqueue_now()
    assert len(sent) == 1


def test_base_backend_is_abstract():
    with pytest.raises(TypeError):
        BaseJobBackend()
