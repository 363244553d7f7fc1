from __future__ import annotations

from typing import Any, Optional, Protocol

from .keys import Key
from .readiness import ReadinessSignal
from .records import Record


class MapTarget(Protocol):
    """Anything the initial load can seed: only `set(key, value)` is used."""

    def set(self, key: Any, value: Any) -> Any:
        ...


class ChangeObserver(Protocol):
    """Receives mutations from an ObservableMap after they are applied locally."""

    def on_set(self, key: Key, value: Any) -> None:
        ...

    def on_delete(self, key: Key) -> None:
        ...

    def on_clear(self) -> None:
        ...


class AsyncMapProvider(Protocol):
    async def init_async(self, target: MapTarget, *, timeout: Optional[float] = None) -> ReadinessSignal: ...

    async def set_async(self, key: Key, value: Any) -> None: ...
    async def delete_async(self, key: Key) -> None: ...

    async def fetch_async(self, key: Key) -> Record | None: ...
    async def has_async(self, key: Key) -> bool: ...

    async def bulk_delete_async(self) -> None: ...
