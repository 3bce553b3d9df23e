"""Non-blocking HTTP transport driven one event-loop tick at a time."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Coroutine, Dict, List, Mapping, Optional, Protocol, Tuple

import httpx

from .errors import TransportInitError

logger = logging.getLogger("influx_sdk.transport")


def _thread_has_running_loop() -> bool:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return False
    return True


@dataclass(frozen=True)
class TransferResult:
    ok: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class TransferRegistry(Protocol):
    """What the scheduler needs from a transport."""

    def create_transfer(self, url: str, body: bytes) -> Any:
        ...

    def poll_all(self) -> List[Tuple[Any, TransferResult]]:
        ...

    def release(self, handle: Any) -> None:
        ...

    def cancel_all(self) -> List[Tuple[Any, TransferResult]]:
        ...


class TransportEngine:
    """Process-wide transport state: a private event loop that nobody else runs.

    Acquire it once at startup (``initialize`` or ``with TransportEngine()``)
    and release it once at shutdown. Clients borrow it to schedule transfers;
    they never own it.
    """

    def __init__(self) -> None:
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def __enter__(self) -> "TransportEngine":
        if not self.initialize():
            raise TransportInitError("transport engine failed to initialize")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cleanup()

    @property
    def active(self) -> bool:
        return self._loop is not None and not self._loop.is_closed()

    def initialize(self) -> bool:
        if self.active:
            return True
        try:
            self._loop = asyncio.new_event_loop()
        except OSError as exc:
            logger.error("Transport engine failed to start: %s", exc)
            return False
        logger.debug("Transport engine started")
        return True

    def cleanup(self) -> None:
        loop = self._loop
        if loop is None:
            return
        self._loop = None
        try:
            pending = [task for task in asyncio.all_tasks(loop) if not task.done()]
            for task in pending:
                task.cancel()
            if _thread_has_running_loop():
                logger.warning("Closing transport engine inside a running event loop; %d tasks not drained", len(pending))
                return
            if pending:
                logger.warning("Cancelling %d unfinished transport tasks at cleanup", len(pending))
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_asyncgens())
            loop.run_until_complete(loop.shutdown_default_executor())
        finally:
            loop.close()
        logger.debug("Transport engine stopped")

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        if not self.active:
            raise TransportInitError("transport engine is not initialized")
        return self._loop  # type: ignore[return-value]

    def _require_drivable_loop(self) -> asyncio.AbstractEventLoop:
        loop = self._require_loop()
        if _thread_has_running_loop():
            raise TransportInitError("poll() cannot run inside a running event loop; drive the client from synchronous code")
        return loop

    @property
    def drivable(self) -> bool:
        return self.active and not _thread_has_running_loop()

    def create_task(self, coro: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
        return self._require_loop().create_task(coro)

    def run_once(self) -> None:
        """Run exactly one iteration of the loop without waiting for I/O."""
        loop = self._require_drivable_loop()
        loop.call_soon(loop.stop)
        loop.run_forever()

    def run(self, coro: Coroutine[Any, Any, Any]) -> Any:
        return self._require_drivable_loop().run_until_complete(coro)


def _result_of(task: "asyncio.Task[httpx.Response]") -> TransferResult:
    if task.cancelled():
        return TransferResult(ok=False, error="cancelled before completion")
    exc = task.exception()
    if exc is not None:
        return TransferResult(ok=False, error=f"{type(exc).__name__}: {exc}")
    response = task.result()
    if response.is_success:
        return TransferResult(ok=True, status_code=response.status_code)
    return TransferResult(
        ok=False,
        status_code=response.status_code,
        error=f"HTTP {response.status_code} {response.reason_phrase}".rstrip(),
    )


class MultiTransport:
    """Registry of concurrent POSTs sharing one ``httpx.AsyncClient``.

    Completed handles stay registered until ``release`` is called, so a
    completion is reported on every ``poll_all`` until the owner retires it.
    Within a tick, completions are reported in registration order.
    """

    def __init__(
        self,
        engine: TransportEngine,
        *,
        timeout: Optional[float] = 5.0,
        headers: Optional[Mapping[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._engine = engine
        self._client = httpx.AsyncClient(timeout=timeout, headers=dict(headers or {}), transport=transport)
        self._handles: Dict["asyncio.Task[httpx.Response]", float] = {}
        self._closed = False

    @property
    def pending(self) -> int:
        return len(self._handles)

    def create_transfer(self, url: str, body: bytes) -> "asyncio.Task[httpx.Response]":
        if self._closed:
            raise TransportInitError("transfer registry is closed")
        coro = self._client.post(url, content=body)
        try:
            task = self._engine.create_task(coro)
        except (TransportInitError, RuntimeError) as exc:
            coro.close()
            raise TransportInitError(f"could not allocate a transfer for {url}") from exc
        self._handles[task] = time.monotonic()
        return task

    def poll_all(self) -> List[Tuple["asyncio.Task[httpx.Response]", TransferResult]]:
        if not self._handles:
            return []
        self._engine.run_once()
        return [(handle, _result_of(handle)) for handle in self._handles if handle.done()]

    def release(self, handle: "asyncio.Task[httpx.Response]") -> None:
        started = self._handles.pop(handle, None)
        if started is None:
            raise ValueError("transfer handle is not registered or was already released")
        if not handle.done():
            handle.cancel()
        logger.debug("Released transfer after %.3fs", time.monotonic() - started)

    def cancel_all(self) -> List[Tuple["asyncio.Task[httpx.Response]", TransferResult]]:
        handles = list(self._handles)
        if not handles:
            return []
        for handle in handles:
            handle.cancel()
        if self._engine.drivable:
            self._engine.run(asyncio.gather(*handles, return_exceptions=True))
        cancelled = TransferResult(ok=False, error="cancelled before completion")
        return [(handle, _result_of(handle) if handle.done() else cancelled) for handle in handles]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._handles:
            logger.warning("Closing transport with %d unreleased transfers", len(self._handles))
        if self._engine.drivable:
            self._engine.run(self._client.aclose())
        elif self._engine.active:
            logger.warning("Transport closed inside a running event loop; HTTP client left open")


__all__ = ["TransportEngine", "MultiTransport", "TransferRegistry", "TransferResult"]
