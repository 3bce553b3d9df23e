"""Size-triggered buffer for encoded line-protocol records."""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

DEFAULT_CAPACITY = 2048


class PointBuffer:
    """Accumulates complete lines and hands them to ``sink`` as one payload."""

    def __init__(self, sink: Callable[[bytes], object], capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("buffer capacity must be positive")
        self._sink = sink
        self._capacity = capacity
        self._lines: List[bytes] = []
        self._size = 0
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._lines)

    def is_empty(self) -> bool:
        return self._size == 0

    def contents(self) -> bytes:
        with self._lock:
            return b"".join(self._lines)

    def append(self, line: str) -> bool:
        """Store one encoded line; returns True if it triggered a flush."""
        if not line.endswith("\n") or "\n" in line[:-1] or len(line) == 1:
            raise ValueError("buffer only accepts a single non-empty newline-terminated line")
        encoded = line.encode("utf-8")
        with self._lock:
            self._lines.append(encoded)
            self._size += len(encoded)
            full = self._size >= self._capacity
        if full:
            self.flush()
        return full

    def flush(self) -> Optional[bytes]:
        with self._lock:
            if not self._lines:
                return None
            payload = b"".join(self._lines)
            self._lines.clear()
            self._size = 0
        self._sink(payload)
        return payload


__all__ = ["PointBuffer", "DEFAULT_CAPACITY"]
