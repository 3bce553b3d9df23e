"""Measurement points and their line-protocol encoding."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any, List, Optional, Tuple

from .errors import EmptyFieldsError


class Precision(Enum):
    NANOSECOND = "n"
    MICROSECOND = "u"
    MILLISECOND = "ms"
    SECOND = "s"
    MINUTE = "m"
    HOUR = "h"

    @property
    def code(self) -> str:
        return self.value

    @property
    def nanoseconds(self) -> int:
        return _UNIT_NANOSECONDS[self]

    @classmethod
    def parse(cls, text: str) -> "Precision":
        """Resolve a wire code (``ms``) or member name (``millisecond``)."""
        raw = text.strip()
        for member in cls:
            if raw.lower() == member.value or raw.upper() == member.name:
                return member
        raise ValueError(f"Unknown precision: {text!r}")


_UNIT_NANOSECONDS = {
    Precision.NANOSECOND: 1,
    Precision.MICROSECOND: 1_000,
    Precision.MILLISECOND: 1_000_000,
    Precision.SECOND: 1_000_000_000,
    Precision.MINUTE: 60 * 1_000_000_000,
    Precision.HOUR: 3_600 * 1_000_000_000,
}


def format_tag_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_field_value(value: Any) -> str:
    if value is None:
        raise ValueError("field values must not be None")
    if isinstance(value, str):
        return '"' + value.replace('"', '\\"') + '"'
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Metric:
    """A single measurement observation.

    The timestamp is captured when the metric is built, so encoding the same
    metric again (even at another precision) never re-reads the clock. Tags and
    fields are stored pre-formatted as ``key=value`` and can only be appended.
    """

    def __init__(self, measurement: str, *, timestamp_ns: Optional[int] = None) -> None:
        if not measurement:
            raise ValueError("measurement name must be non-empty")
        if timestamp_ns is not None and timestamp_ns < 0:
            raise ValueError("timestamp_ns must not be negative")
        self._measurement = measurement
        self._tags: List[str] = []
        self._fields: List[str] = []
        self._timestamp_ns = time.time_ns() if timestamp_ns is None else timestamp_ns

    @property
    def measurement(self) -> str:
        return self._measurement

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(self._tags)

    @property
    def fields(self) -> Tuple[str, ...]:
        return tuple(self._fields)

    @property
    def timestamp_ns(self) -> int:
        return self._timestamp_ns

    def add_tag(self, key: str, value: Any) -> "Metric":
        self._tags.append(f"{key}={format_tag_value(value)}")
        return self

    def add_field(self, key: str, value: Any) -> "Metric":
        self._fields.append(f"{key}={format_field_value(value)}")
        return self

    def timestamp(self, precision: Precision) -> int:
        return self._timestamp_ns // precision.nanoseconds

    def to_line(self, precision: Precision) -> str:
        return encode_line(self, precision)

    def __repr__(self) -> str:
        return f"Metric({self._measurement!r}, tags={len(self._tags)}, fields={len(self._fields)})"


def encode_line(metric: Metric, precision: Precision) -> str:
    """Render ``metric`` as one newline-terminated line-protocol record.

    Only string field values are escaped (embedded quotes become ``\\"``);
    measurement names, tags and other field values are written verbatim.
    """
    if not metric.fields:
        raise EmptyFieldsError(f"metric {metric.measurement!r} has no fields")
    head = ",".join((metric.measurement,) + metric.tags)
    return f"{head} {','.join(metric.fields)} {metric.timestamp(precision)}\n"


__all__ = ["Precision", "Metric", "encode_line", "format_field_value", "format_tag_value"]
