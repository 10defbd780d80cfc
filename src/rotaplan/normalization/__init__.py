"""Input normalization."""

from .config_resolver import DEFAULT_CONFIG, resolve_effective_config
from .request import normalize_request, normalize_subjects

__all__ = [
    "DEFAULT_CONFIG",
    "normalize_request",
    "normalize_subjects",
    "resolve_effective_config",
]
