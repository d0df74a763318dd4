"""Current-application tracking.

The active :class:`~asyncable.app.Asyncable` app (configuration, backend and
target registry) lives in a ``ContextVar``. Nesting is explicit via
:func:`push_current_app`; teardown via :func:`reset_current_app`.
"""
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import TYPE_CHECKING, Generator

from .utils.proxy import Proxy

if TYPE_CHECKING:  # pragma: no cover
    from .app import Asyncable

_current_app: ContextVar["Asyncable | None"] = ContextVar("asyncable_current_app", default=None)
_default_app: "Asyncable | None" = None


def _build_default_app() -> "Asyncable":
    """Create the lazily constructed default app.

    Imported here so that :mod:`asyncable.app` is only loaded once an app is
    actually needed.
    """
    from .app import Asyncable

    return Asyncable("default")


def get_current_app() -> "Asyncable":
    """Return the active app, creating a default one if none is set."""
    app = _current_app.get()
    if app is None:
        global _default_app
        if _default_app is None:
            _default_app = _build_default_app()
        app = _default_app
        set_current_app(app)
    return app


def peek_current_app() -> "Asyncable | None":
    """Return the active app without creating a default one."""
    return _current_app.get()


def set_current_app(app: "Asyncable") -> None:
    _current_app.set(app)


def reset_current_app() -> None:
    """Forget the active and default apps (used by teardown and tests)."""
    global _default_app
    _default_app = None
    _current_app.set(None)


@contextmanager
def push_current_app(app: "Asyncable") -> Generator["Asyncable", None, None]:
    token = _current_app.set(app)
    try:
        yield app
    finally:
        _current_app.reset(token)


current_app = Proxy(get_current_app)

__all__ = [
    "current_app",
    "get_current_app",
    "peek_current_app",
    "push_current_app",
    "reset_current_app",
    "set_current_app",
]
