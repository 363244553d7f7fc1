from __future__ import annotations

import asyncio
import logging
import threading
from typing import Optional

from .errors import ProviderNotReadyError

logger = logging.getLogger(__name__)

POLL_INTERVAL = 0.01


class ReadinessSignal:
    """
    One-shot "initial load finished" event.

    - fire() resolves it exactly once; later calls are no-ops.
    - fail() moves it to a terminal failed state so waiters stop blocking.
    - wait()/wait_async() return immediately once resolved.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._event = threading.Event()
        self._error: Optional[BaseException] = None

    @property
    def is_set(self) -> bool:
        return self._event.is_set() and self._error is None

    @property
    def failed(self) -> bool:
        return self._event.is_set() and self._error is not None

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    def fire(self) -> bool:
        with self._guard:
            if self._event.is_set():
                logger.debug("READINESS: already resolved, ignoring fire()")
                return False
            self._event.set()
            return True

    def fail(self, error: BaseException) -> bool:
        with self._guard:
            if self._event.is_set():
                logger.debug("READINESS: already resolved, ignoring fail(%r)", error)
                return False
            self._error = error
            self._event.set()
            return True

    def wait(self, timeout: Optional[float] = None) -> bool:
        if not self._event.wait(timeout):
            raise ProviderNotReadyError(f"provider not ready after {timeout}s")
        self._raise_if_failed()
        return True

    async def wait_async(self, timeout: Optional[float] = None) -> bool:
        # cancel-safe: no worker thread is parked on the event
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while not self._event.is_set():
            if deadline is not None and loop.time() >= deadline:
                raise ProviderNotReadyError(f"provider not ready after {timeout}s")
            await asyncio.sleep(POLL_INTERVAL)
        self._raise_if_failed()
        return True

    def _raise_if_failed(self) -> None:
        if self._error is not None:
            raise ProviderNotReadyError("provider failed to initialize") from self._error

    def __repr__(self) -> str:
        if self.failed:
            state = "failed"
        elif self.is_set:
            state = "ready"
        else:
            state = "pending"
        return f"<ReadinessSignal {state}>"
