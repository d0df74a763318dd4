# asyncable/registry.py
"""Explicit name -> target registry.

Workers rebuild a live call from the string stored in a job payload. Rather than
walking the interpreter's module namespace, targets are registered under a
stable name at startup (normally via the ``@asyncable`` decorator) and looked
up here.
"""

import logging
from threading import RLock
from typing import Any, Iterator

from asgiref.sync import sync_to_async

from .exceptions import (
    AnonymousTargetError,
    RegistryCollisionError,
    RegistryFrozenError,
    TargetNotFoundError,
)

logger = logging.getLogger(__name__)


def _coerce_name(name: Any) -> str:
    key = str(name or "").strip()
    if not key:
        raise ValueError("target name must be a non-empty string")
    if "." in key:
        raise ValueError(f"target name {key!r} must not contain '.'")
    return key


def default_name_for(cls: type) -> str:
    """Return the name a class registers under when none is given."""
    explicit = vars(cls).get("__asyncable_name__") if isinstance(cls, type) else getattr(cls, "__asyncable_name__", None)
    if explicit:
        return str(explicit)
    name = getattr(cls, "__name__", None)
    if not name:
        raise AnonymousTargetError(cls, "has no __name__")
    return name


class TargetRegistry:
    """Lock-guarded mapping of target names to classes (or any object exposing methods)."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._store: dict[str, Any] = {}
        self._names: dict[int, str] = {}
        self._frozen = False

    # --- registration ---

    def register(self, target: Any, name: str | None = None) -> str:
        """
        Register *target* under *name* (default: its ``__name__``).

        Registering the same target under the same name again is a no-op.

        :param target: The class or namespace object to expose to workers.
        :param name: Optional explicit name; must not contain ``.``.
        :return: The name the target is registered under.
        :raises RegistryCollisionError: If the name is taken by a different target.
        :raises RegistryFrozenError: If the registry has been frozen.
        """
        key = _coerce_name(name if name is not None else default_name_for(target))
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is frozen")
            existing = self._store.get(key)
            if existing is target:
                logger.debug("Duplicate registration ignored: %s", key)
                return key
            if existing is not None:
                raise RegistryCollisionError(
                    f"Target name {key!r} already registered to {existing!r}"
                )
            self._store[key] = target
            self._names[id(target)] = key
        logger.debug("Registered async target '%s' -> %r", key, target)
        return key

    def unregister(self, name: str) -> None:
        key = _coerce_name(name)
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError("Registry is frozen")
            target = self._store.pop(key, None)
            if target is not None and self._names.get(id(target)) == key:
                del self._names[id(target)]

    # --- retrieval ---

    def resolve(self, name: str) -> Any:
        """
        Return the target registered under *name*.

        :raises TargetNotFoundError: If nothing is registered under the name.
        """
        with self._lock:
            try:
                return self._store[str(name)]
            except KeyError as err:
                raise TargetNotFoundError(f"No target registered as {name!r}") from err

    async def aresolve(self, name: str) -> Any:
        """Async wrapper around :meth:`resolve`."""
        return await sync_to_async(self.resolve)(name)

    def try_resolve(self, name: str) -> Any | None:
        try:
            return self.resolve(name)
        except TargetNotFoundError:
            return None

    def name_for(self, target: Any) -> str:
        """
        Return the registered name of *target*.

        :raises AnonymousTargetError: If the target was never registered.
        """
        with self._lock:
            key = self._names.get(id(target))
            if key is not None and self._store.get(key) is target:
                return key
        raise AnonymousTargetError(target)

    # --- lifecycle ---

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._names.clear()
            self._frozen = False

    def all(self) -> dict[str, Any]:
        with self._lock:
            return dict(self._store)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return str(name) in self._store

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __iter__(self) -> Iterator[tuple[str, Any]]:  # pragma: no cover - convenience
        return iter(self.all().items())


__all__ = ["TargetRegistry", "default_name_for"]
