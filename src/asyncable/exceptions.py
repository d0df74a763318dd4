# asyncable/exceptions.py
"""Unified exception hierarchy for asyncable.

Capture-time errors (`BlockNotSupportedError`, `NonSerializableArgumentsError`,
`AnonymousTargetError`) are raised at the caller's point of dispatch and before
the job backend is contacted. `UnresolvableTargetError` is raised worker-side so
the backend's retry/dead-letter policy can act on it.
"""

from __future__ import annotations

from typing import Any

__all__ = [
    "AsyncableError",
    "BlockNotSupportedError",
    "NonSerializableArgumentsError",
    "AnonymousTargetError",
    "UnresolvableTargetError",
    "EncodeError",
    "ProxyConsumedError",
    "RegistryError",
    "RegistryCollisionError",
    "RegistryFrozenError",
    "TargetNotFoundError",
    "BackendNotFoundError",
]


class AsyncableError(Exception):
    """Base for all asyncable exceptions."""


# ----------------------------------------------------------------------------
# Capture errors
# ----------------------------------------------------------------------------
class BlockNotSupportedError(AsyncableError, TypeError):
    """A deferred call carried an executable callback/closure."""

    def __init__(self, target: str, method: str, argument: Any = None) -> None:
        super().__init__(
            f"Cannot defer {target}.{method}: callables cannot be carried in a job payload "
            f"(got {type(argument).__name__})"
        )
        self.target = target
        self.method = method
        self.argument = argument


class NonSerializableArgumentsError(AsyncableError, TypeError):
    """Arguments (or the composed payload) failed backend encoding."""

    def __init__(self, target: str, method: str, cause: BaseException | str) -> None:
        super().__init__(f"Arguments for {target}.{method} are not serializable: {cause}")
        self.target = target
        self.method = method
        self.cause = cause


class AnonymousTargetError(AsyncableError):
    """The target has no stable, resolvable name and cannot be deferred."""

    def __init__(self, target: Any, reason: str = "is not registered") -> None:
        label = getattr(target, "__qualname__", None) or repr(target)
        super().__init__(f"Anonymous target {label} {reason}; it cannot be executed asynchronously")
        self.target = target


class ProxyConsumedError(AsyncableError, RuntimeError):
    """A single-use scheduling proxy was invoked more than once."""


# ----------------------------------------------------------------------------
# Backend / worker errors
# ----------------------------------------------------------------------------
class EncodeError(AsyncableError, ValueError):
    """Raised by a job backend when a payload cannot be encoded."""


class UnresolvableTargetError(AsyncableError, LookupError):
    """A stored target name does not resolve to a live target at execution time."""

    def __init__(self, raw: str, cause: BaseException | str) -> None:
        super().__init__(f"Failed to resolve {raw!r}: {cause}")
        self.raw = raw
        self.cause = cause


class BackendNotFoundError(AsyncableError, LookupError):
    """No job backend is registered under the requested name."""


# ----------------------------------------------------------------------------
# Registry errors
# ----------------------------------------------------------------------------
class RegistryError(AsyncableError): ...


class RegistryCollisionError(RegistryError): ...


class RegistryFrozenError(RuntimeError, RegistryError): ...


class TargetNotFoundError(RegistryError, LookupError): ...
