"""Strict JSON helpers for job payloads.

Payloads cross a process boundary, so only values that survive a JSON round
trip unchanged are accepted: exactly ``str``, ``int``, ``float`` (finite),
``bool``, ``None``, ``list`` of those and ``dict`` keyed by ``str``. Tuples
and subclasses such as ``IntEnum`` members decode as something else, so they
are rejected.
"""

from __future__ import annotations

import json
import math
from typing import Any

_SCALARS = (str, int, bool, type(None))


def assert_jsonable(value: Any, *, path: str = "root", extra_types: tuple[type, ...] = ()) -> None:
    """Raise ``TypeError`` if *value* cannot be represented losslessly in JSON.

    ``extra_types`` lets transports with richer encoders (e.g. kombu's JSON,
    which round-trips ``datetime`` and ``UUID``) widen the accepted domain.
    """

    def _check(val: Any, prefix: str) -> None:
        kind = type(val)
        if kind in _SCALARS:
            return
        if kind is float:
            if not math.isfinite(val):
                raise TypeError(f"{prefix} is not JSON serializable (non-finite float {val!r})")
            return
        if extra_types and isinstance(val, extra_types):
            return
        if kind is dict:
            for key, inner in val.items():
                if type(key) is not str:
                    raise TypeError(
                        f"{prefix} has a non-string key {key!r} (type={type(key).__name__})"
                    )
                _check(inner, f"{prefix}.{key}")
            return
        if kind is list:
            for idx, inner in enumerate(val):
                _check(inner, f"{prefix}[{idx}]")
            return
        raise TypeError(f"{prefix} is not JSON serializable (type={kind.__name__})")

    _check(value, path)


def dumps(payload: Any) -> bytes:
    assert_jsonable(payload)
    return json.dumps(payload, allow_nan=False, separators=(",", ":")).encode("utf-8")


def loads(data: bytes | str) -> Any:
    if isinstance(data, bytes):
        data = data.decode("utf-8")
    return json.loads(data)


__all__ = ["assert_jsonable", "dumps", "loads"]
