from __future__ import annotations

import asyncio

import mongomock
import pytest
from pymongo.errors import ServerSelectionTimeoutError

from enmap_mongo import MongoProvider, ProviderNotReadyError, ProviderState


def _unreachable(url, **kwargs):
    raise ServerSelectionTimeoutError("no servers found")


class _ExplodingTarget:
    def __init__(self, fail_on: int):
        self.fail_on = fail_on
        self.applied: list = []

    def set(self, key, value):
        if len(self.applied) == self.fail_on:
            raise RuntimeError("target rejected row")
        self.applied.append(key)


def test_connection_error_propagates_and_fails_readiness():
    p = MongoProvider(name="x", client_factory=_unreachable)

    with pytest.raises(ServerSelectionTimeoutError):
        p.init({})

    assert p.state is ProviderState.FAILED
    assert p.ready.failed
    with pytest.raises(ProviderNotReadyError) as exc_info:
        p.ready.wait(timeout=0.1)
    assert isinstance(exc_info.value.__cause__, ServerSelectionTimeoutError)

    with pytest.raises(ProviderNotReadyError):
        asyncio.run(p.ready.wait_async())


def test_load_aborts_on_first_failing_row_without_rollback():
    client = mongomock.MongoClient()
    client["enmap"]["rows"].insert_many([{"_id": i, "value": i} for i in range(5)])

    p = MongoProvider(name="rows", fetch_all=True, client_factory=lambda url, **kw: client)
    target = _ExplodingTarget(fail_on=2)

    with pytest.raises(RuntimeError, match="target rejected row"):
        p.init(target)

    assert len(target.applied) == 2
    assert p.state is ProviderState.FAILED
    assert not p.ready.is_set
