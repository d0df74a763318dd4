"""Default configuration values for asyncable.

Dispatch options (QUEUE, RETRY, ...) are deliberately absent so that the job
backend's own defaults apply unless a project overrides them.
"""

DEFAULTS: dict[str, object] = {
    "BACKEND": "immediate",
    "VALIDATE_ARGUMENTS": True,
}

# Used only when the backend does not expose defaults of its own.
FALLBACK_OPTIONS: dict[str, object] = {
    "queue": "default",
    "retry": True,
}

# Settings keys that map 1:1 onto `Configuration` fields.
OPTION_KEYS: tuple[str, ...] = (
    "QUEUE",
    "RETRY",
    "DEAD",
    "BACKTRACE",
    "POOL",
    "TAGS",
    "VALIDATE_ARGUMENTS",
)

NAMESPACE = "ASYNCABLE"
