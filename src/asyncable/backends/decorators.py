import logging
from typing import Type, TypeVar

from .base import BaseJobBackend
from .registry import register_backend

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Type[BaseJobBackend])


def job_backend(name: str):
    """
    Class decorator to register a job backend under a stable name.

    Usage
    -----
        @job_backend("memory")
        class InMemoryBackend(BaseJobBackend):
            ...

    Registration happens at import time; `asyncable.backends` imports the
    built-in backends so they are always available. Third-party backends must
    be imported during startup (or registered with `register_backend`).
    """

    def _wrap(cls: T) -> T:
        if not issubclass(cls, BaseJobBackend):
            raise TypeError("@job_backend can only decorate BaseJobBackend subclasses")
        cls.name = name
        register_backend(name, cls)
        logger.debug("Registered job backend '%s' for '%s'", name, cls)
        return cls

    return _wrap
