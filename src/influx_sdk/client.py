"""Python clients for an InfluxDB-style ``/write`` endpoint."""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import httpx
from prometheus_client import Counter

from .buffer import PointBuffer
from .config import ClientConfig
from .errors import TransportInitError
from .failures import FailureLog
from .metric import Metric
from .scheduler import TransferScheduler
from .transport import MultiTransport, TransportEngine

logger = logging.getLogger("influx_sdk.client")

POINTS_ENCODED = Counter("influx_sdk_points_total", "Points encoded into the write buffer")


class MetricsClient(Protocol):
    def add_metric(self, metric: Metric) -> None:
        ...

    def flush(self) -> None:
        ...

    def poll(self) -> int:
        ...

    def is_active(self) -> bool:
        ...

    def drain_failures(self, clear: bool = True) -> List[str]:
        ...

    def close(self) -> None:
        ...


class HttpClient:
    """Buffers encoded points and writes them without blocking the caller.

    Transfers only progress inside ``poll``, which must be called from
    synchronous code: inside a running event loop it raises
    ``TransportInitError``. Leaving a ``with`` block or calling ``close``
    drops anything still buffered and cancels in-flight transfers, so shut
    down with::

        client.flush()
        while client.is_active():
            client.poll()
        client.close()
    """

    def __init__(
        self,
        config: ClientConfig,
        engine: TransportEngine,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not engine.active:
            raise TransportInitError("transport engine must be initialized before creating a client")
        self._config = config
        self._write_url = config.write_url
        self._failures = FailureLog(enabled=config.capture_failures)
        self._transport = MultiTransport(engine, timeout=config.timeout, headers=self._headers(), transport=transport)
        self._scheduler = TransferScheduler(self._transport, self._failures)
        self._buffer = PointBuffer(self._submit, capacity=config.buffer_capacity)
        self._closed = False

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _headers(self) -> dict:
        headers = {
            "User-Agent": self._config.user_agent,
            "Content-Type": "text/plain; charset=utf-8",
        }
        headers.update(self._config.headers)
        return headers

    def _submit(self, payload: bytes) -> None:
        self._scheduler.submit(payload, self._write_url)

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def failures(self) -> FailureLog:
        return self._failures

    @property
    def buffered_bytes(self) -> int:
        return self._buffer.size

    @property
    def in_flight(self) -> int:
        return self._scheduler.in_flight

    def add_metric(self, metric: Metric) -> None:
        self._buffer.append(metric.to_line(self._config.precision))
        POINTS_ENCODED.inc()

    def flush(self) -> None:
        self._buffer.flush()

    def poll(self) -> int:
        return self._scheduler.poll()

    def is_active(self) -> bool:
        return self._scheduler.is_active()

    def drain_failures(self, clear: bool = True) -> List[str]:
        return self._failures.drain(clear=clear)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if not self._buffer.is_empty():
            logger.warning("Closing client with %d unflushed bytes", self._buffer.size)
        abandoned = self._scheduler.cancel_all()
        if abandoned:
            logger.warning("Closed client with %d transfers still in flight", abandoned)
        self._transport.close()


class NullClient:
    """Accepts every call and sends nothing; used when metrics are disabled."""

    def __enter__(self) -> "NullClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def add_metric(self, metric: Metric) -> None:
        return None

    def flush(self) -> None:
        return None

    def poll(self) -> int:
        return 0

    def is_active(self) -> bool:
        return False

    def drain_failures(self, clear: bool = True) -> List[str]:
        return []

    def close(self) -> None:
        return None


def create_client(
    config: ClientConfig,
    engine: Optional[TransportEngine] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> MetricsClient:
    if not config.enabled:
        logger.info("Metrics disabled; using NullClient")
        return NullClient()
    if engine is None:
        raise TransportInitError("an initialized TransportEngine is required when metrics are enabled")
    return HttpClient(config, engine, transport=transport)


__all__ = ["MetricsClient", "HttpClient", "NullClient", "create_client"]
