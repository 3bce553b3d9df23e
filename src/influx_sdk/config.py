"""Configuration objects for the InfluxDB Python SDK."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from .buffer import DEFAULT_CAPACITY
from .metric import Precision


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class ClientConfig:
    base_url: str
    database: str
    precision: Precision = Precision.NANOSECOND
    buffer_capacity: int = DEFAULT_CAPACITY
    capture_failures: bool = True
    enabled: bool = True
    timeout: Optional[float] = 5.0
    user_agent: str = "influx-sdk-python/0.1.0"
    headers: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must be configured")
        if not self.database:
            raise ValueError("database must be configured")
        if self.buffer_capacity <= 0:
            raise ValueError("buffer_capacity must be positive")
        if isinstance(self.precision, str):
            object.__setattr__(self, "precision", Precision.parse(self.precision))

    @property
    def write_url(self) -> str:
        url = httpx.URL(
            self.base_url.rstrip("/") + "/write",
            params={"db": self.database, "precision": self.precision.code},
        )
        return str(url)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        timeout_raw = os.environ.get("INFLUX_TIMEOUT", "5.0")
        return cls(
            base_url=os.environ.get("INFLUX_URL", "http://localhost:8086"),
            database=os.environ.get("INFLUX_DATABASE", ""),
            precision=Precision.parse(os.environ.get("INFLUX_PRECISION", "n")),
            buffer_capacity=int(os.environ.get("INFLUX_BUFFER_CAPACITY", str(DEFAULT_CAPACITY))),
            capture_failures=_env_flag("INFLUX_CAPTURE_FAILURES", True),
            enabled=_env_flag("INFLUX_ENABLED", True),
            timeout=float(timeout_raw) if timeout_raw.strip() else None,
        )


__all__ = ["ClientConfig"]
