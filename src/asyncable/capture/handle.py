# asyncable/capture/handle.py
"""Deferred call handles returned by intercepted methods."""

from __future__ import annotations

import operator
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable

from .dispatch import Mode, enqueue, target_label

if TYPE_CHECKING:  # pragma: no cover
    from ..app import Asyncable
    from ..backends.base import Delay, Timestamp


class DeferredCall:
    """One captured call on an async target.

    Nothing runs until the caller decides:

    - ``force()`` (or ``sync()``, ``value()``, ``result()``) runs the call in-process,
      once; later calls return the cached result
    - ``enqueue_now()`` / ``enqueue_after(delay)`` / ``enqueue_at(timestamp)`` submit a job

    Any other attribute or operator is forwarded to ``force()``'s result, so a
    handle can stand in for the direct return value::

        total = Billing.total(order_id)   # DeferredCall
        total + 10                        # runs Billing.total once, then adds
    """

    def __init__(
        self,
        target: Any,
        method_name: str,
        args: Sequence[Any] = (),
        kwargs: Mapping[str, Any] | None = None,
        *,
        executor: Callable[[], Any],
        app: "Asyncable | None" = None,
        fn: Callable[..., Any] | None = None,
    ) -> None:
        self._target = target
        self._method_name = method_name
        self._args = tuple(args)
        self._kwargs = dict(kwargs or {})
        self._executor = executor
        self._app = app
        self._fn = fn
        self._performed = False
        self._result: Any = None

    @property
    def target(self) -> Any:
        return self._target

    @property
    def method_name(self) -> str:
        return self._method_name

    @property
    def arguments(self) -> tuple[Any, ...]:
        return self._args

    @property
    def kwargs(self) -> dict[str, Any]:
        return dict(self._kwargs)

    @property
    def performed(self) -> bool:
        return self._performed

    # ---------- synchronous path ----------
    def force(self) -> Any:
        """Run the call in-process on first use and return the cached result afterwards.

        Errors from the method propagate unchanged and leave the handle unperformed.
        """
        if not self._performed:
            self._result = self._executor()
            self._performed = True
        return self._result

    sync = value = result = force

    # ---------- asynchronous path ----------
    def enqueue_now(self) -> str:
        return self._enqueue(Mode.NOW)

    def enqueue_after(self, delay: "Delay") -> str:
        return self._enqueue(Mode.AFTER, delay)

    def enqueue_at(self, timestamp: "Timestamp") -> str:
        return self._enqueue(Mode.AT, timestamp)

    def _enqueue(self, mode: Mode, schedule: Any = None) -> str:
        return enqueue(
            self._target,
            self._method_name,
            self._args,
            self._kwargs,
            mode=mode,
            schedule=schedule,
            app=self._app,
            fn=self._fn,
        )

    # ---------- transparent delegation ----------
    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self.force(), name)

    def __repr__(self) -> str:
        rendered = [repr(a) for a in self._args]
        rendered.extend(f"{k}={v!r}" for k, v in self._kwargs.items())
        return f"<DeferredCall {target_label(self._target)}.{self._method_name}({', '.join(rendered)})>"

    __str__ = __repr__

    def __hash__(self) -> int:
        return hash(self.force())

    def __bool__(self) -> bool:
        return bool(self.force())

    def __len__(self) -> int:
        return len(self.force())

    def __iter__(self):
        return iter(self.force())

    def __contains__(self, item: Any) -> bool:
        return item in self.force()

    def __getitem__(self, key: Any) -> Any:
        return self.force()[key]

    def __int__(self) -> int:
        return int(self.force())

    def __float__(self) -> float:
        return float(self.force())

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.force()(*args, **kwargs)


def _binary(op: Callable[[Any, Any], Any]) -> Callable[[DeferredCall, Any], Any]:
    def method(self: DeferredCall, other: Any) -> Any:
        return op(self.force(), other)

    return method


def _reflected(op: Callable[[Any, Any], Any]) -> Callable[[DeferredCall, Any], Any]:
    def method(self: DeferredCall, other: Any) -> Any:
        return op(other, self.force())

    return method


for _name, _op in {
    "eq": operator.eq,
    "ne": operator.ne,
    "lt": operator.lt,
    "le": operator.le,
    "gt": operator.gt,
    "ge": operator.ge,
    "add": operator.add,
    "sub": operator.sub,
    "mul": operator.mul,
    "truediv": operator.truediv,
    "floordiv": operator.floordiv,
    "mod": operator.mod,
}.items():
    setattr(DeferredCall, f"__{_name}__", _binary(_op))

for _name, _op in {
    "radd": operator.add,
    "rsub": operator.sub,
    "rmul": operator.mul,
    "rtruediv": operator.truediv,
    "rfloordiv": operator.floordiv,
    "rmod": operator.mod,
}.items():
    setattr(DeferredCall, f"__{_name}__", _reflected(_op))

del _name, _op

__all__ = ["DeferredCall"]
