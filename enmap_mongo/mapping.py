from __future__ import annotations

from collections.abc import MutableMapping
from typing import Any, Iterator

from .interfaces import ChangeObserver
from .keys import Key


class ObservableMap(MutableMapping):
    """
    Dict-backed map that reports every mutation to its observers.

    Observers run after the local change is applied, in subscription order.
    An observer that raises propagates to the caller; the local change is
    not rolled back.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._data: dict[Key, Any] = dict(*args, **kwargs)
        self._observers: list[ChangeObserver] = []

    def subscribe(self, observer: ChangeObserver) -> None:
        if observer not in self._observers:
            self._observers.append(observer)

    def unsubscribe(self, observer: ChangeObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    @property
    def observers(self) -> list[ChangeObserver]:
        return list(self._observers)

    def set(self, key: Key, value: Any) -> "ObservableMap":
        self[key] = value
        return self

    def __getitem__(self, key: Key) -> Any:
        return self._data[key]

    def __setitem__(self, key: Key, value: Any) -> None:
        self._data[key] = value
        for obs in list(self._observers):
            obs.on_set(key, value)

    def __delitem__(self, key: Key) -> None:
        del self._data[key]
        for obs in list(self._observers):
            obs.on_delete(key)

    def clear(self) -> None:
        # one purge event instead of a delete per key
        self._data.clear()
        for obs in list(self._observers):
            obs.on_clear()

    def __iter__(self) -> Iterator[Key]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ObservableMap({self._data!r})"
