from __future__ import annotations

from pathlib import Path
import sys
from typing import Any, Callable

import mongomock
import pytest


# Make `import enmap_mongo` work without installing the package.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


class RecordingClientFactory:
    """
    Hands every provider the same in-memory mongomock client so a second
    provider sees what the first one wrote, and records how it was called.
    """

    def __init__(self) -> None:
        self.client = mongomock.MongoClient()
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def __call__(self, url: str, **kwargs: Any) -> mongomock.MongoClient:
        self.calls.append((url, kwargs))
        return self.client


@pytest.fixture
def client_factory() -> RecordingClientFactory:
    return RecordingClientFactory()


@pytest.fixture
def make_provider(client_factory: RecordingClientFactory) -> Callable[..., Any]:
    """
    Build MongoProviders wired to the shared mongomock client.
    """
    from enmap_mongo import MongoProvider

    def _make(name: str = "test", **kwargs: Any) -> MongoProvider:
        return MongoProvider(name=name, client_factory=client_factory, **kwargs)

    return _make


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """
    Remove every ENMAP_MONGO_* variable so settings tests start from defaults.
    """
    import os

    for key in list(os.environ):
        if key.startswith("ENMAP_MONGO_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
