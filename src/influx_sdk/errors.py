"""Exceptions raised by the InfluxDB Python SDK."""

from __future__ import annotations


class InfluxSdkError(Exception):
    """Base class for SDK errors."""


class TransportInitError(InfluxSdkError):
    """The transport engine or a transfer handle could not be set up."""


class EmptyFieldsError(InfluxSdkError, ValueError):
    """A point was encoded without any fields."""


__all__ = ["InfluxSdkError", "TransportInitError", "EmptyFieldsError"]
