from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Callable, Mapping, Optional

from pymongo import MongoClient
from pymongo.write_concern import WriteConcern

from .errors import ProviderStateError
from .interfaces import AsyncMapProvider, ChangeObserver, MapTarget
from .keys import Key, validate_key
from .mapping import ObservableMap
from .options import ProviderOptions, mask_url
from .readiness import ReadinessSignal
from .records import Record

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class ProviderState(str, enum.Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    CLOSED = "closed"


class MongoProvider(ChangeObserver, AsyncMapProvider):
    """
    Backs an in-memory map with one MongoDB collection.

    Lifecycle:
      UNINITIALIZED -> CONNECTING -> (LOADING ->) READY -> CLOSED
    with FAILED as the terminal state of an init() that raised.

    Every stored row has the shape { "_id": key, "value": value }. The map
    itself is only touched during init(); afterwards the owner either calls
    set()/delete() on every mutation, or uses attach() with an ObservableMap
    so mutations are mirrored automatically.

    close() does not wait for in-flight calls; callers must not close while
    writes are outstanding.
    """

    def __init__(
        self,
        options: ProviderOptions | Mapping[str, Any] | None = None,
        *,
        client_factory: ClientFactory = MongoClient,
        **option_kwargs: Any,
    ) -> None:
        self._options = ProviderOptions.build(options, **option_kwargs)
        self._client_factory = client_factory
        self._client: Any = None
        self._collection: Any = None
        self._writer: Any = None
        self._attached: Optional[ObservableMap] = None
        self._state = ProviderState.UNINITIALIZED
        self.ready = ReadinessSignal()

    @property
    def options(self) -> ProviderOptions:
        return self._options

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def db_name(self) -> str:
        return self._options.db_name

    @property
    def url(self) -> str:
        return self._options.connection_url()

    @property
    def state(self) -> ProviderState:
        return self._state

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------

    def init(self, target: MapTarget, *, timeout: Optional[float] = None) -> ReadinessSignal:
        """
        Connect, seed `target` from the collection (when fetch_all is set)
        and fire the readiness signal.

        `timeout` (seconds) bounds server selection for this connect. Any
        connection or load error propagates unchanged; the readiness signal
        is failed with it so waiters do not block forever. Rows applied
        before a failing row stay applied.
        """
        if self._state is not ProviderState.UNINITIALIZED:
            raise ProviderStateError(f"init() called on a provider in state {self._state.value!r}")

        self._state = ProviderState.CONNECTING
        driver_kwargs = self._options.driver_kwargs()
        if timeout is not None:
            driver_kwargs["serverSelectionTimeoutMS"] = max(1, int(timeout * 1000))

        logger.info("PROVIDER INIT: connecting to %s (collection=%s)", mask_url(self.url), self.name)
        try:
            self._client = self._client_factory(self.url, **driver_kwargs)
            self._client.admin.command("ping")
            self._collection = self._client[self.db_name][self.name]
            if self._options.acknowledge_sync_writes:
                self._writer = self._collection
            else:
                self._writer = self._collection.with_options(write_concern=WriteConcern(w=0))

            if self._options.fetch_all:
                self._state = ProviderState.LOADING
                loaded = self._load_into(target)
                logger.info("PROVIDER INIT: loaded %d rows from %s", loaded, self.name)
        except Exception as e:
            self._state = ProviderState.FAILED
            self.ready.fail(e)
            logger.warning("PROVIDER INIT: failed for %s: %r", self.name, e)
            self._release_client()
            raise

        self._state = ProviderState.READY
        self.ready.fire()
        return self.ready

    async def init_async(self, target: MapTarget, *, timeout: Optional[float] = None) -> ReadinessSignal:
        return await asyncio.to_thread(self.init, target, timeout=timeout)

    def _load_into(self, target: MapTarget) -> int:
        count = 0
        for doc in self._collection.find({}):
            record = Record.from_document(doc)
            target.set(record.id, record.value)
            count += 1
        return count

    def close(self) -> None:
        if self._state is ProviderState.CLOSED:
            return
        self.detach()
        self._release_client()
        self._state = ProviderState.CLOSED
        logger.info("PROVIDER CLOSE: %s", self.name)

    def _release_client(self) -> None:
        client, self._client = self._client, None
        self._collection = None
        self._writer = None
        if client is not None:
            client.close()

    def __enter__(self) -> "MongoProvider":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _require_ready(self) -> None:
        if self._state is not ProviderState.READY:
            raise ProviderStateError(f"provider {self.name!r} is {self._state.value}, not ready")

    # ------------------------------------------------------------------
    # mutations
    # ------------------------------------------------------------------

    def set(self, key: Key, value: Any) -> None:
        """
        Upsert `{_id: key, value: value}`, replacing any stored document.

        Fire-and-forget: the write goes out with write concern w=0, so the
        server does not acknowledge it and write errors are not observed
        here. Use set_async(), or `acknowledge_sync_writes`, to observe them.
        """
        validate_key(key)
        self._require_ready()
        self._upsert(self._writer, key, value)

    async def set_async(self, key: Key, value: Any) -> None:
        validate_key(key)
        self._require_ready()
        await asyncio.to_thread(self._upsert, self._collection, key, value)

    @staticmethod
    def _upsert(collection: Any, key: Key, value: Any) -> None:
        doc = Record(id=key, value=value).to_document()
        collection.replace_one({"_id": key}, doc, upsert=True)

    def delete(self, key: Key) -> None:
        """Remove at most one row. Fire-and-forget like set()."""
        self._require_ready()
        self._writer.delete_one({"_id": key})

    async def delete_async(self, key: Key) -> None:
        self._require_ready()
        await asyncio.to_thread(self._collection.delete_one, {"_id": key})

    def bulk_delete(self) -> None:
        """Drop the whole collection. Irreversible."""
        self._require_ready()
        self._collection.drop()
        logger.info("PROVIDER PURGE: dropped collection %s", self.name)

    async def bulk_delete_async(self) -> None:
        await asyncio.to_thread(self.bulk_delete)

    # ------------------------------------------------------------------
    # reads
    # ------------------------------------------------------------------

    def fetch(self, key: Key) -> Record | None:
        """Point lookup. Never updates the in-memory map."""
        self._require_ready()
        doc = self._collection.find_one({"_id": key})
        if doc is None:
            return None
        return Record.from_document(doc)

    async def fetch_async(self, key: Key) -> Record | None:
        return await asyncio.to_thread(self.fetch, key)

    def has(self, key: Key) -> bool:
        self._require_ready()
        return self._collection.count_documents({"_id": key}, limit=1) > 0

    async def has_async(self, key: Key) -> bool:
        return await asyncio.to_thread(self.has, key)

    def count(self) -> int:
        self._require_ready()
        return self._collection.count_documents({})

    def keys(self) -> list[Key]:
        self._require_ready()
        return [doc["_id"] for doc in self._collection.find({}, {"_id": 1})]

    # ------------------------------------------------------------------
    # observer wiring
    # ------------------------------------------------------------------

    def attach(self, target: ObservableMap, *, timeout: Optional[float] = None) -> ReadinessSignal:
        """
        init() `target`, then subscribe to it so later mutations are mirrored.

        Subscription happens after the load so seeded rows are not written back.
        """
        signal = self.init(target, timeout=timeout)
        target.subscribe(self)
        self._attached = target
        return signal

    def detach(self) -> None:
        if self._attached is not None:
            self._attached.unsubscribe(self)
            self._attached = None

    def on_set(self, key: Key, value: Any) -> None:
        self.set(key, value)

    def on_delete(self, key: Key) -> None:
        self.delete(key)

    def on_clear(self) -> None:
        self.bulk_delete()

    def __repr__(self) -> str:
        return f"MongoProvider(name={self.name!r}, db={self.db_name!r}, state={self._state.value!r})"
