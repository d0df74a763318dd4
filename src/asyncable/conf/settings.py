"""Mapping-like configuration inspired by Celery settings handling."""


import importlib
import os
from collections import ChainMap
from typing import Any, Iterator, Mapping, MutableMapping

from .defaults import DEFAULTS, NAMESPACE


class Settings(MutableMapping[str, Any]):
    """Layered settings with defaults and optional overlays."""

    def __init__(self, *layers: Mapping[str, Any]) -> None:
        self._storage = ChainMap({}, *(dict(layer) for layer in layers), dict(DEFAULTS))

    # Mapping protocol -------------------------------------------------
    def __getitem__(self, key: str) -> Any:
        return self._storage[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._storage.maps[0][key] = value

    def __delitem__(self, key: str) -> None:
        del self._storage.maps[0][key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._storage)

    def __len__(self) -> int:
        return len(self._storage)

    # Helpers ----------------------------------------------------------
    def update_from_object(self, obj: str | Any, *, namespace: str | None = None) -> None:
        """Load upper-case attributes from a module path (or an already imported object)."""
        source = importlib.import_module(obj) if isinstance(obj, str) else obj
        self.update_from_mapping(_namespaced_attributes(source, namespace), namespace=None)

    def update_from_envvar(self, envvar: str = "ASYNCABLE_CONFIG_MODULE", *, namespace: str | None = None) -> None:
        module_name = os.environ.get(envvar)
        if not module_name:
            return
        self.update_from_object(module_name, namespace=namespace)

    def update_from_env(self, *, namespace: str = NAMESPACE) -> None:
        """Apply ``{NAMESPACE}_<KEY>`` environment variables (``ASYNCABLE_QUEUE=critical``)."""
        prefix = f"{namespace}_"
        found = {
            key[len(prefix):]: value
            for key, value in os.environ.items()
            if key.startswith(prefix) and key[len(prefix):] in _ENV_KEYS
        }
        self._storage.maps[0].update(found)

    def update_from_mapping(self, mapping: Mapping[str, Any], *, namespace: str | None = None) -> None:
        self._storage.maps[0].update(_filter_by_namespace(mapping, namespace))

    def explicit(self) -> dict[str, Any]:
        """Return only the keys set on top of the package defaults."""
        merged: dict[str, Any] = {}
        for layer in reversed(self._storage.maps[:-1]):
            merged.update(layer)
        return merged


def _filter_by_namespace(mapping: Mapping[str, Any], namespace: str | None) -> dict[str, Any]:
    if namespace is None:
        return {k.upper(): v for k, v in mapping.items() if isinstance(k, str)}

    prefix = f"{namespace}_"
    output: dict[str, Any] = {}
    for key, value in mapping.items():
        if not key.startswith(prefix):
            continue
        short_key = key[len(prefix) :]
        output[short_key] = value
    return output


def _namespaced_attributes(obj: Any, namespace: str | None) -> dict[str, Any]:
    """
    Supports two shapes:
    1) obj has attribute ASYNCABLE = {...}
    2) obj has ASYNCABLE_* attributes that become keys

    Without a namespace every upper-case attribute is returned as-is.
    """
    if namespace is None:
        return {k: getattr(obj, k) for k in dir(obj) if k.isupper()}

    ns = namespace.upper()
    out: dict[str, Any] = {}

    nested = getattr(obj, ns, None)
    if isinstance(nested, Mapping):
        out.update({str(k).upper(): v for k, v in nested.items()})

    prefix = ns + "_"
    for key in dir(obj):
        if key.startswith(prefix):
            out[key[len(prefix):]] = getattr(obj, key)
    return out


_ENV_KEYS = frozenset({"BACKEND", "QUEUE", "RETRY", "DEAD", "BACKTRACE", "POOL", "TAGS", "VALIDATE_ARGUMENTS"})

__all__ = ["Settings"]
