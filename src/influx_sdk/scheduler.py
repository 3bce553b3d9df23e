"""Poll-driven scheduler for in-flight write transfers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from prometheus_client import Counter, Gauge

from .failures import FailureLog
from .transport import TransferRegistry, TransferResult

logger = logging.getLogger("influx_sdk.scheduler")

TRANSFERS_SUBMITTED = Counter("influx_sdk_transfers_submitted_total", "Write transfers submitted")
TRANSFER_BYTES = Counter("influx_sdk_transfer_bytes_total", "Line-protocol bytes submitted")
TRANSFERS_COMPLETED = Counter(
    "influx_sdk_transfers_completed_total",
    "Write transfers retired by outcome",
    ["outcome"],
)
TRANSFERS_IN_FLIGHT = Gauge("influx_sdk_transfers_in_flight", "Write transfers awaiting completion")


class TransferState(str, Enum):
    SUBMITTED = "submitted"
    IN_FLIGHT = "in_flight"
    COMPLETED_OK = "completed_ok"
    COMPLETED_FAILED = "completed_failed"


@dataclass
class Transfer:
    url: str
    body: bytes
    handle: Any = field(default=None, repr=False)
    state: TransferState = TransferState.SUBMITTED
    result: Optional[TransferResult] = None

    @property
    def done(self) -> bool:
        return self.state in (TransferState.COMPLETED_OK, TransferState.COMPLETED_FAILED)


class TransferScheduler:
    """Tracks submitted transfers and retires each one exactly once.

    Nothing runs in the background: progress only happens inside ``poll``,
    which advances the transport by a single tick and then retires every
    transfer it reports as finished. Callers loop on ``poll`` until
    ``is_active`` turns false.
    """

    def __init__(self, transport: TransferRegistry, failures: Optional[FailureLog] = None) -> None:
        self._transport = transport
        self._failures = failures if failures is not None else FailureLog(enabled=False)
        self._in_flight: Dict[Any, Transfer] = {}

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    @property
    def failures(self) -> FailureLog:
        return self._failures

    def is_active(self) -> bool:
        return bool(self._in_flight)

    def submit(self, body: bytes, url: str) -> Transfer:
        transfer = Transfer(url=url, body=bytes(body))
        transfer.handle = self._transport.create_transfer(url, transfer.body)
        transfer.state = TransferState.IN_FLIGHT
        self._in_flight[transfer.handle] = transfer
        TRANSFERS_SUBMITTED.inc()
        TRANSFER_BYTES.inc(len(transfer.body))
        TRANSFERS_IN_FLIGHT.inc()
        logger.debug("Submitted transfer url=%s bytes=%d in_flight=%d", url, len(transfer.body), len(self._in_flight))
        return transfer

    def poll(self) -> int:
        """Advance all transfers one tick; returns how many were retired."""
        if not self._in_flight:
            return 0
        completions = self._transport.poll_all()
        for handle, result in completions:
            self._retire(handle, result)
        return len(completions)

    def cancel_all(self) -> int:
        if not self._in_flight:
            return 0
        completions = self._transport.cancel_all()
        for handle, result in completions:
            self._retire(handle, result)
        return len(completions)

    def _retire(self, handle: Any, result: TransferResult) -> None:
        transfer = self._in_flight.pop(handle)
        transfer.result = result
        if result.ok:
            transfer.state = TransferState.COMPLETED_OK
            logger.debug("Transfer completed url=%s status=%s", transfer.url, result.status_code)
        else:
            transfer.state = TransferState.COMPLETED_FAILED
            logger.warning("Transfer failed url=%s error=%s", transfer.url, result.error)
            if self._failures.enabled():
                self._failures.record(f"POST {transfer.url} failed: {result.error}")
        self._transport.release(handle)
        TRANSFERS_COMPLETED.labels(outcome="ok" if result.ok else "failed").inc()
        TRANSFERS_IN_FLIGHT.dec()


__all__ = ["TransferScheduler", "Transfer", "TransferState"]
