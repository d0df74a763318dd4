import os

import pytest

from asyncable import Asyncable
from asyncable._state import reset_current_app
from asyncable.backends import InMemoryBackend


class SpyBackend(InMemoryBackend):
    """In-memory backend that also records every enqueue call it receives."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.calls = []

    def enqueue_now(self, job, payload):
        self.calls.append(("now", job, None, list(payload)))
        return super().enqueue_now(job, payload)

    def enqueue_after(self, job, delay, payload):
        self.calls.append(("after", job, delay, list(payload)))
        return super().enqueue_after(job, delay, payload)

    def enqueue_at(self, job, timestamp, payload):
        self.calls.append(("at", job, timestamp, list(payload)))
        return super().enqueue_at(job, timestamp, payload)


@pytest.fixture(autouse=True)
def _isolated_state(monkeypatch):
    for key in list(os.environ):
        if key.startswith("ASYNCABLE_"):
            monkeypatch.delenv(key, raising=False)
    reset_current_app()
    yield
    reset_current_app()


@pytest.fixture()
def backend():
    return SpyBackend()


@pytest.fixture()
def app(backend):
    app = Asyncable("test", backend=backend)
    with app.as_current():
        yield app
    app.close()
