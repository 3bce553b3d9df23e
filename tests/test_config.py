from __future__ import annotations

import pytest

from influx_sdk.config import ClientConfig
from influx_sdk.metric import Precision


def test_write_url_includes_database_and_precision_code() -> None:
    cfg = ClientConfig(base_url="http://localhost:8086/", database="test_db", precision=Precision.MILLISECOND)
    assert cfg.write_url == "http://localhost:8086/write?db=test_db&precision=ms"


@pytest.mark.parametrize("precision", list(Precision))
def test_write_url_precision_codes(precision: Precision) -> None:
    cfg = ClientConfig(base_url="http://db", database="x", precision=precision)
    assert cfg.write_url.endswith(f"&precision={precision.code}")


def test_defaults() -> None:
    cfg = ClientConfig(base_url="http://db", database="x")
    assert cfg.precision is Precision.NANOSECOND
    assert cfg.buffer_capacity == 2048
    assert cfg.capture_failures is True
    assert cfg.enabled is True


def test_precision_accepts_text() -> None:
    cfg = ClientConfig(base_url="http://db", database="x", precision="s")  # type: ignore[arg-type]
    assert cfg.precision is Precision.SECOND


@pytest.mark.parametrize(
    "overrides",
    [{"base_url": ""}, {"database": ""}, {"buffer_capacity": 0}],
)
def test_invalid_config(overrides: dict) -> None:
    options = {"base_url": "http://db", "database": "x"}
    options.update(overrides)
    with pytest.raises(ValueError):
        ClientConfig(**options)


def test_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("INFLUX_URL", "http://influx:8086")
    monkeypatch.setenv("INFLUX_DATABASE", "metrics")
    monkeypatch.setenv("INFLUX_PRECISION", "ms")
    monkeypatch.setenv("INFLUX_BUFFER_CAPACITY", "4096")
    monkeypatch.setenv("INFLUX_CAPTURE_FAILURES", "false")
    monkeypatch.setenv("INFLUX_ENABLED", "yes")
    monkeypatch.setenv("INFLUX_TIMEOUT", "")
    cfg = ClientConfig.from_env()
    assert cfg.write_url == "http://influx:8086/write?db=metrics&precision=ms"
    assert cfg.buffer_capacity == 4096
    assert cfg.capture_failures is False
    assert cfg.enabled is True
    assert cfg.timeout is None


def test_from_env_requires_database(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("INFLUX_DATABASE", raising=False)
    with pytest.raises(ValueError):
        ClientConfig.from_env()
