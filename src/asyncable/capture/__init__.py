"""Call capture: scheduling proxies, transparent interception and deferred call handles."""

from .dispatch import Mode, enqueue, prepare_payload, submit
from .handle import DeferredCall
from .intercept import RESERVED, CallBuilder, asyncable, capture, deferrable, install_interception
from .proxy import AsyncableMixin, SchedulingProxy
from .results import CallResult, Deferred, Immediate

__all__ = [
    "AsyncableMixin",
    "CallBuilder",
    "CallResult",
    "Deferred",
    "DeferredCall",
    "Immediate",
    "Mode",
    "RESERVED",
    "SchedulingProxy",
    "asyncable",
    "capture",
    "deferrable",
    "enqueue",
    "install_interception",
    "prepare_payload",
    "submit",
]
