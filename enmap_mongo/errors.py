from __future__ import annotations


class EnmapMongoError(Exception):
    """Base class for every error raised by the provider itself."""


class ConfigurationError(EnmapMongoError, ValueError):
    pass


class KeyTypeError(EnmapMongoError, TypeError):
    pass


class ProviderStateError(EnmapMongoError, RuntimeError):
    """Operation called in the wrong lifecycle state (before init, after close)."""


class ProviderNotReadyError(EnmapMongoError, RuntimeError):
    """
    Raised by readiness waits that time out, or when initialization failed.

    The underlying failure, if any, is available as `__cause__`.
    """
