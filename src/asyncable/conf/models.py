# asyncable/conf/models.py

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

from .defaults import FALLBACK_OPTIONS, OPTION_KEYS

# Fields forwarded to the backend's per-call option override mechanism.
DISPATCH_FIELDS: frozenset[str] = frozenset({"queue", "retry", "dead", "backtrace", "pool", "tags"})


class Configuration(BaseModel):
    """Default dispatch options read by every enqueue.

    Attribute assignment is validated, so ``conf.retry = "5"`` stores ``5``.
    ``None`` means "absent": the field is left out of :attr:`effective_options`
    and the backend applies its own behaviour.
    """

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    queue: str | None = None
    retry: bool | int | None = None
    dead: bool | None = None
    backtrace: bool | int | None = None
    pool: str | None = None
    tags: list[str] | None = None
    validate_arguments: bool = True

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [t.strip() for t in value.split(",") if t.strip()]
        if isinstance(value, (set, frozenset)):
            return sorted(str(t) for t in value)
        if isinstance(value, tuple):
            return list(value)
        return value

    @classmethod
    def from_backend(cls, backend: Any | None = None, **overrides: Any) -> "Configuration":
        """Build a configuration seeded from *backend* defaults.

        Precedence (last wins): fixed fallbacks < ``backend.default_options()`` < overrides.
        Overrides explicitly set to ``None`` stay absent.
        """
        values: dict[str, Any] = dict(FALLBACK_OPTIONS)
        getter = getattr(backend, "default_options", None)
        if callable(getter):
            values.update({k: v for k, v in dict(getter() or {}).items() if k in cls.model_fields})
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any], backend: Any | None = None) -> "Configuration":
        """Build from upper-case settings keys (``QUEUE``, ``RETRY``, ...)."""
        overrides = {key.lower(): settings[key] for key in OPTION_KEYS if key in settings}
        return cls.from_backend(backend, **overrides)

    @property
    def effective_options(self) -> dict[str, Any]:
        """Non-absent dispatch options, ready for ``backend.apply_options``."""
        return self.model_dump(include=set(DISPATCH_FIELDS), exclude_none=True)

    def update(self, mapping: Mapping[str, Any] | None = None, **values: Any) -> "Configuration":
        """Apply several setters at once (keys are case-insensitive)."""
        for key, value in {**dict(mapping or {}), **values}.items():
            setattr(self, str(key).lower(), value)
        return self


__all__ = ["Configuration", "DISPATCH_FIELDS"]
