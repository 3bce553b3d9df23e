"""Caller-drained record of failed transfers."""

from __future__ import annotations

from typing import List


class FailureLog:
    """Collects human-readable failure messages until the caller drains them.

    Nothing here bounds the list; callers that enable capture are expected to
    drain it periodically.
    """

    def __init__(self, enabled: bool = True) -> None:
        self._enabled = enabled
        self._messages: List[str] = []

    def record(self, message: str) -> None:
        if not self._enabled:
            return
        self._messages.append(message)

    def drain(self, clear: bool = True) -> List[str]:
        messages = list(self._messages)
        if clear:
            self._messages.clear()
        return messages

    def clear(self) -> None:
        self._messages.clear()

    def enabled(self) -> bool:
        return self._enabled

    def __len__(self) -> int:
        return len(self._messages)


__all__ = ["FailureLog"]
