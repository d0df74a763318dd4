# asyncable/capture/proxy.py
"""Scheduling proxies for declared async entry points.

``Mailer.run_async().deliver(42)`` submits ``["Mailer.deliver", 42]`` at once
and returns the backend's job id; ``run_after(delay)`` and ``run_at(timestamp)``
do the same with a schedule. A proxy dispatches exactly one call.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any

from ..backends.base import Delay, Timestamp, delay_seconds, epoch_seconds
from ..exceptions import ProxyConsumedError
from .dispatch import APP_ATTR, Mode, enqueue, target_label
from .intercept import CallBuilder, is_reserved

if TYPE_CHECKING:  # pragma: no cover
    from ..app import Asyncable

logger = logging.getLogger(__name__)


class SchedulingProxy:
    def __init__(self, target: Any, mode: Mode, schedule: Any = None, *, app: "Asyncable | None" = None) -> None:
        # reject a bad delay/timestamp up front
        if mode is Mode.AFTER:
            delay_seconds(schedule)
        elif mode is Mode.AT:
            epoch_seconds(schedule)
        self._target = target
        self._mode = mode
        self._schedule = schedule
        self._app = app
        self._consumed = False

    @property
    def consumed(self) -> bool:
        return self._consumed

    def _supports(self, name: str) -> bool:
        return not name.startswith("_") and callable(getattr(self._target, name, None))

    def _method(self, name: str) -> Any:
        if is_reserved(name) or not self._supports(name):
            raise AttributeError(f"{target_label(self._target)} has no public method {name!r}")
        return getattr(self._target, name)

    def invoke(self, name: str, *args: Any, **kwargs: Any) -> str:
        """Dispatch ``target.name(*args, **kwargs)`` with this proxy's mode and return the job id."""
        if self._consumed:
            raise ProxyConsumedError(
                f"scheduling proxy for {target_label(self._target)} was already used; "
                f"call {self._mode.value} again for another job"
            )
        fn = self._method(name)
        self._consumed = True
        logger.debug("scheduling %s.%s (mode=%s)", target_label(self._target), name, self._mode.value)
        return enqueue(
            self._target,
            name,
            args,
            kwargs,
            mode=self._mode,
            schedule=self._schedule,
            app=self._app,
            fn=fn,
        )

    def __getattr__(self, name: str) -> Any:
        if not self._supports(name):
            raise AttributeError(f"{target_label(self._target)} has no public method {name!r}")
        return functools.partial(self.invoke, name)

    def __dir__(self) -> list[str]:
        own = set(super().__dir__())
        own.update(n for n in dir(self._target) if self._supports(n))
        return sorted(own)

    def __repr__(self) -> str:
        schedule = "" if self._schedule is None else f" {self._schedule!r}"
        return f"<SchedulingProxy {target_label(self._target)} {self._mode.value}{schedule}>"


class AsyncableMixin:
    """Declares ``run_async``/``run_after``/``run_at`` entry points on a class.

    Register the class as well (``@asyncable`` or ``app.register``) so workers
    can resolve it.
    """

    @classmethod
    def run_async(cls) -> SchedulingProxy:
        return SchedulingProxy(cls, Mode.NOW, app=getattr(cls, APP_ATTR, None))

    @classmethod
    def run_after(cls, delay: Delay) -> SchedulingProxy:
        return SchedulingProxy(cls, Mode.AFTER, delay, app=getattr(cls, APP_ATTR, None))

    @classmethod
    def run_at(cls, timestamp: Timestamp) -> SchedulingProxy:
        return SchedulingProxy(cls, Mode.AT, timestamp, app=getattr(cls, APP_ATTR, None))

    @classmethod
    def capture(cls) -> CallBuilder:
        return CallBuilder(cls, app=getattr(cls, APP_ATTR, None))


__all__ = ["AsyncableMixin", "SchedulingProxy"]
