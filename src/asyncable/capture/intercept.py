# asyncable/capture/intercept.py
"""
Transparent interception and the explicit call builder.

Opting in::

    @asyncable(intercept=True)
    class Billing:
        @staticmethod
        def total(order_id): ...

    handle = Billing.total(42)     # DeferredCall, nothing ran yet
    handle.enqueue_after(60)       # or handle.force() / handle + 10

or per method with ``@deferrable``. Only static and class methods defined in
the class body are wrapped; instance methods, private names and the reserved
dispatch names are left alone. Subclasses of an intercepted class are wrapped
when they are created. Methods attached later with ``setattr`` are picked up by
calling :func:`install_interception` again.

:func:`capture` is the explicit alternative: ``capture(Billing).invoke("total", 42)``
returns ``Deferred(handle)`` for intercepted methods and ``Immediate(value)``
for everything else.
"""

from __future__ import annotations

import functools
import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from ..exceptions import RegistryError
from ..worker import ORIGINAL_ATTR
from .dispatch import APP_ATTR, app_for, target_label
from .handle import DeferredCall
from .results import CallResult, Deferred, Immediate

if TYPE_CHECKING:  # pragma: no cover
    from ..app import Asyncable

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=type)

DEFERRED_ATTR = "__asyncable_deferred__"
HOOK_ATTR = "__asyncable_intercepts__"

RESERVED: frozenset[str] = frozenset(
    {
        "run_async",
        "run_after",
        "run_at",
        "capture",
        "mro",
    }
)


def is_reserved(name: str) -> bool:
    return name.startswith("_") or name in RESERVED


class _DeferredMethod:
    """Descriptor that turns a static/class method call into a :class:`DeferredCall`."""

    def __init__(self, method: staticmethod | classmethod) -> None:
        self.method = method
        self.name: str | None = None
        self.__doc__ = getattr(method, "__doc__", None)

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: Any, owner: type | None = None) -> Callable[..., DeferredCall]:
        owner = owner if owner is not None else type(instance)
        original = self.method.__get__(instance, owner)
        name = self.name or original.__name__

        @functools.wraps(original)
        def deferred(*args: Any, **kwargs: Any) -> DeferredCall:
            return DeferredCall(
                owner,
                name,
                args,
                kwargs,
                executor=functools.partial(original, *args, **kwargs),
                fn=original,
            )

        setattr(deferred, ORIGINAL_ATTR, original)
        setattr(deferred, DEFERRED_ATTR, True)
        return deferred

    def __repr__(self) -> str:
        return f"<deferrable {self.name or self.method!r}>"


def deferrable(method: Any) -> _DeferredMethod:
    """Opt a single static or class method into interception.

    Apply it outermost; a plain function is treated as a static method::

        @deferrable
        @classmethod
        def rebuild(cls, report_id): ...
    """
    if isinstance(method, _DeferredMethod):
        return method
    if not isinstance(method, (staticmethod, classmethod)):
        if not callable(method):
            raise TypeError(f"@deferrable expects a function, staticmethod or classmethod, got {method!r}")
        method = staticmethod(method)
    return _DeferredMethod(method)


def _should_wrap(name: str, attr: Any) -> bool:
    if is_reserved(name) or isinstance(attr, _DeferredMethod):
        return False
    return isinstance(attr, (staticmethod, classmethod))


def install_interception(cls: T) -> T:
    """Wrap every public static/class method defined on *cls*. Safe to call repeatedly."""
    wrapped: list[str] = []
    for name, attr in list(vars(cls).items()):
        if not _should_wrap(name, attr):
            continue
        descriptor = _DeferredMethod(attr)
        descriptor.__set_name__(cls, name)
        setattr(cls, name, descriptor)
        wrapped.append(name)

    _install_subclass_hook(cls)
    if wrapped:
        logger.debug("intercepting %s: %s", target_label(cls), ", ".join(wrapped))
    return cls


def _install_subclass_hook(cls: type) -> None:
    if getattr(cls, HOOK_ATTR, False):
        # an ancestor's hook already covers subclasses of cls
        return

    previous = vars(cls).get("__init_subclass__")

    def __init_subclass__(subclass: type, **kwargs: Any) -> None:
        if previous is not None:
            previous.__get__(None, subclass)(**kwargs)
        else:
            super(cls, subclass).__init_subclass__(**kwargs)
        install_interception(subclass)
        _register_subclass(subclass)

    cls.__init_subclass__ = classmethod(__init_subclass__)
    setattr(cls, HOOK_ATTR, True)


def _register_subclass(subclass: type) -> None:
    registry = app_for(subclass).registry
    try:
        registry.register(subclass)
    except (RegistryError, ValueError) as exc:
        logger.debug("subclass %s not registered: %s", target_label(subclass), exc)


def asyncable(
    cls: T | None = None,
    *,
    name: str | None = None,
    intercept: bool = False,
    app: "Asyncable | None" = None,
) -> T | Callable[[T], T]:
    """Class decorator: register *cls* for async execution, optionally intercepting its methods.

    ``app`` pins the class to a specific app; otherwise the current app is used
    both now (registration) and at dispatch time.
    """

    def decorate(klass: T) -> T:
        if name is not None:
            klass.__asyncable_name__ = name
        if app is not None:
            setattr(klass, APP_ATTR, app)
        app_for(klass, app).register(klass, name=name)
        if intercept:
            install_interception(klass)
        return klass

    if cls is None:
        return decorate
    return decorate(cls)


class CallBuilder:
    """Explicit entry point: ``invoke(name, *args)`` returns a tagged result."""

    def __init__(self, target: Any, *, app: "Asyncable | None" = None) -> None:
        self.target = target
        self.app = app

    def _lookup(self, name: str) -> Callable[..., Any]:
        if not isinstance(name, str) or is_reserved(name):
            raise AttributeError(f"{name!r} cannot be invoked through a call builder")
        fn = getattr(self.target, name)
        if not callable(fn):
            raise AttributeError(f"{target_label(self.target)}.{name} is not callable")
        return fn

    def is_deferrable(self, name: str) -> bool:
        return bool(getattr(self._lookup(name), DEFERRED_ATTR, False))

    def defer(self, name: str, *args: Any, **kwargs: Any) -> DeferredCall:
        """Capture ``target.name(*args, **kwargs)`` without running it, intercepted or not."""
        fn = self._lookup(name)
        original = getattr(fn, ORIGINAL_ATTR, fn)
        return DeferredCall(
            self.target,
            name,
            args,
            kwargs,
            executor=functools.partial(original, *args, **kwargs),
            app=self.app,
            fn=original,
        )

    def invoke(self, name: str, *args: Any, **kwargs: Any) -> CallResult:
        fn = self._lookup(name)
        if getattr(fn, DEFERRED_ATTR, False):
            return Deferred(self.defer(name, *args, **kwargs))
        return Immediate(fn(*args, **kwargs))

    def __repr__(self) -> str:
        return f"<CallBuilder {target_label(self.target)}>"


def capture(target: Any, app: "Asyncable | None" = None) -> CallBuilder:
    return CallBuilder(target, app=app)


__all__ = [
    "RESERVED",
    "CallBuilder",
    "asyncable",
    "capture",
    "deferrable",
    "install_interception",
    "is_reserved",
]
