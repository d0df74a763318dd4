# asyncable/capture/results.py

from dataclasses import dataclass
from typing import Any, Union

from .handle import DeferredCall


@dataclass(frozen=True, slots=True)
class Immediate:
    """The method ran in-process; ``value`` is its return value."""

    value: Any


@dataclass(frozen=True, slots=True)
class Deferred:
    """The method was captured; nothing has run yet."""

    handle: DeferredCall


CallResult = Union[Immediate, Deferred]

__all__ = ["Immediate", "Deferred", "CallResult"]
