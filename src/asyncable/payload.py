# asyncable/payload.py
"""Job payload wire form.

The payload submitted to a backend is a flat ordered list::

    ["<TargetName>.<method_name>", arg1, arg2, ...]

Target and method are collapsed into one dot-joined string. Decoding splits on
the *first* dot, so target names never contain one (the registry enforces it).
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

__all__ = ["JobPayload", "JobSpec", "PERFORM_JOB", "PERFORM_SPLIT_JOB", "split_callable_path"]


def split_callable_path(callable_path: str) -> tuple[str, str]:
    """Split ``"Target.method"`` into ``("Target", "method")``.

    Raises ``ValueError`` when either side is missing.
    """
    if not isinstance(callable_path, str):
        raise ValueError(f"callable path must be a string, got {type(callable_path).__name__}")
    target_name, sep, method_name = callable_path.partition(".")
    if not sep or not target_name or not method_name:
        raise ValueError(f"malformed callable path {callable_path!r}; expected 'Target.method'")
    return target_name, method_name


@dataclass(frozen=True)
class JobPayload:
    target_name: str
    method_name: str
    args: tuple[Any, ...] = ()

    @property
    def callable_path(self) -> str:
        return f"{self.target_name}.{self.method_name}"

    def to_wire(self) -> list[Any]:
        return [self.callable_path, *self.args]

    @classmethod
    def from_wire(cls, raw: Sequence[Any]) -> "JobPayload":
        if isinstance(raw, (str, bytes)) or not raw:
            raise ValueError("job payload must be a non-empty list")
        target_name, method_name = split_callable_path(raw[0])
        return cls(target_name, method_name, tuple(raw[1:]))

    @classmethod
    def from_fields(cls, target_name: str, method_name: str, *args: Any) -> "JobPayload":
        """Build from the separate-field shape ``[target_name, method_name, *args]``."""
        if not target_name or not method_name:
            raise ValueError("target_name and method_name are required")
        return cls(str(target_name), str(method_name), tuple(args))

    def __str__(self) -> str:
        rendered = ", ".join(repr(a) for a in self.args)
        return f"{self.callable_path}({rendered})"


@dataclass(frozen=True)
class JobSpec:
    """Handle for the worker entry point a payload is submitted to.

    ``options`` holds per-call overrides (queue, retry, ...) applied through
    :meth:`BaseJobBackend.apply_options`.
    """

    name: str
    options: Mapping[str, Any] = field(default_factory=dict)

    def with_options(self, options: Mapping[str, Any]) -> "JobSpec":
        if not options:
            return self
        return replace(self, options={**self.options, **options})


PERFORM_JOB = JobSpec("asyncable.perform")
PERFORM_SPLIT_JOB = JobSpec("asyncable.perform_split")
