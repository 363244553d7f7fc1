from __future__ import annotations

from .errors import (
    ConfigurationError,
    EnmapMongoError,
    KeyTypeError,
    ProviderNotReadyError,
    ProviderStateError,
)
from .keys import validate_key
from .mapping import ObservableMap
from .options import ProviderOptions, sanitize_name
from .provider import MongoProvider, ProviderState
from .readiness import ReadinessSignal
from .records import Record

__all__ = [
    "ConfigurationError",
    "EnmapMongoError",
    "KeyTypeError",
    "ProviderNotReadyError",
    "ProviderStateError",
    "validate_key",
    "ObservableMap",
    "ProviderOptions",
    "sanitize_name",
    "MongoProvider",
    "ProviderState",
    "ReadinessSignal",
    "Record",
]
