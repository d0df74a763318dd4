from __future__ import annotations

"""
Backend registry for job backends.

Registry stores backend CLASSES keyed by normalized name. Names are lowercased
and mapped through `_NAME_ALIASES`, so "inline" finds the immediate backend and
"fake"/"test" find the in-memory one.
"""

from threading import RLock
from typing import Any, Dict, Type

from ..exceptions import BackendNotFoundError
from .base import BaseJobBackend

_NAME_ALIASES = {
    "celery_backend": "celery",
    "inline": "immediate",
    "fake": "memory",
    "test": "memory",
}


def _normalize_name(name: str | None) -> str:
    key = (name or "immediate").strip().lower()
    return _NAME_ALIASES.get(key, key)


__all__ = [
    "register_backend",
    "get_backend_class",
    "create_backend",
    "resolve_backend",
    "list_backend_names",
]

_BACKEND_REGISTRY: Dict[str, Type[BaseJobBackend]] = {}
_LOCK = RLock()


def register_backend(name: str, backend_cls: Type[BaseJobBackend]) -> None:
    """Register a backend class under a normalized name.

    Example:
        register_backend("memory", InMemoryBackend)
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("backend name must be a non-empty string")
    if not isinstance(backend_cls, type):
        raise TypeError("backend_cls must be a class")

    with _LOCK:
        _BACKEND_REGISTRY[_normalize_name(name)] = backend_cls


def get_backend_class(name: str | None) -> Type[BaseJobBackend]:
    key = _normalize_name(name)
    with _LOCK:
        try:
            return _BACKEND_REGISTRY[key]
        except KeyError:
            raise BackendNotFoundError(
                f"No job backend registered as {name!r} (known: {sorted(_BACKEND_REGISTRY)})"
            ) from None


def create_backend(name: str | None, **kwargs: Any) -> BaseJobBackend:
    """Instantiate the backend registered under *name*."""
    return get_backend_class(name)(**kwargs)


def resolve_backend(backend: str | BaseJobBackend | None) -> BaseJobBackend:
    """Accept a backend instance or a registered name."""
    if isinstance(backend, BaseJobBackend):
        return backend
    return create_backend(backend)


def list_backend_names() -> list[str]:
    with _LOCK:
        return list(_BACKEND_REGISTRY.keys())
