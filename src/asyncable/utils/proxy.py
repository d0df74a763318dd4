"""Lazy proxy used for ``asyncable.current_app``.

Every operation is forwarded to whatever the resolver returns *at access time*,
so module-level code can hold ``current_app`` and still see the app that is
active when it runs (tests and workers push their own).
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

T = TypeVar("T")


class Proxy:
    __slots__ = ("_resolver",)

    def __init__(self, resolver: Callable[[], Any]) -> None:
        object.__setattr__(self, "_resolver", resolver)

    def _get_current(self) -> Any:
        return self._resolver()

    def __getattr__(self, name: str) -> Any:
        return getattr(self._get_current(), name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._get_current(), name, value)

    def __getitem__(self, key: Any) -> Any:
        return self._get_current()[key]

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._get_current()(*args, **kwargs)

    def __eq__(self, other: Any) -> bool:
        return self._get_current() == maybe_evaluate(other)

    def __ne__(self, other: Any) -> bool:
        return not self == other

    def __hash__(self) -> int:
        return hash(self._get_current())

    def __bool__(self) -> bool:
        return bool(self._get_current())

    def __dir__(self) -> list[str]:
        return dir(self._get_current())

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Proxy of {self._get_current()!r}>"


def maybe_evaluate(value: T | Proxy) -> T:
    """Return the proxied object for a :class:`Proxy`, anything else unchanged."""
    if isinstance(value, Proxy):
        return value._get_current()
    return value
