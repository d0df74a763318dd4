from .defaults import DEFAULTS, FALLBACK_OPTIONS, NAMESPACE
from .models import Configuration
from .settings import Settings

__all__ = ["Configuration", "Settings", "DEFAULTS", "FALLBACK_OPTIONS", "NAMESPACE"]
