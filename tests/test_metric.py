from __future__ import annotations

import pytest

from influx_sdk.errors import EmptyFieldsError
from influx_sdk.metric import Metric, Precision, encode_line, format_field_value

TS = 1_700_000_123_456_789_012


def test_line_without_tags() -> None:
    metric = Metric("user_logins", timestamp_ns=TS).add_field("count", 1)
    assert metric.to_line(Precision.NANOSECOND) == f"user_logins count=1 {TS}\n"


def test_line_with_tags_and_fields_in_order() -> None:
    metric = (
        Metric("cpu", timestamp_ns=TS)
        .add_tag("host", "web01")
        .add_tag("region", "eu")
        .add_field("idle", 0.5)
        .add_field("busy", 2)
    )
    assert encode_line(metric, Precision.SECOND) == "cpu,host=web01,region=eu idle=0.5,busy=2 1700000123\n"


def test_zero_fields_is_rejected() -> None:
    metric = Metric("empty", timestamp_ns=TS).add_tag("host", "a")
    with pytest.raises(EmptyFieldsError):
        metric.to_line(Precision.MILLISECOND)
    with pytest.raises(ValueError):
        encode_line(Metric("bare"), Precision.NANOSECOND)


def test_string_fields_are_quoted_and_escaped() -> None:
    metric = Metric("chat", timestamp_ns=TS).add_field("value", 'He said "hi"')
    assert 'value="He said \\"hi\\""' in metric.to_line(Precision.NANOSECOND)


def test_non_string_values_are_not_quoted() -> None:
    assert format_field_value(42) == "42"
    assert format_field_value(1.25) == "1.25"
    assert format_field_value(True) == "true"
    assert format_field_value(False) == "false"
    line = Metric("m", timestamp_ns=TS).add_field("n", 3).add_tag("t", 7).to_line(Precision.NANOSECOND)
    assert '"' not in line


def test_tag_and_name_characters_are_not_escaped() -> None:
    line = Metric("my measure", timestamp_ns=TS).add_tag("k", "a,b").add_field("f", 1).to_line(Precision.HOUR)
    assert line.startswith("my measure,k=a,b f=1 ")


@pytest.mark.parametrize(
    "precision, expected",
    [
        (Precision.NANOSECOND, TS),
        (Precision.MICROSECOND, TS // 1_000),
        (Precision.MILLISECOND, TS // 1_000_000),
        (Precision.SECOND, TS // 1_000_000_000),
        (Precision.MINUTE, TS // 60_000_000_000),
        (Precision.HOUR, TS // 3_600_000_000_000),
    ],
)
def test_timestamp_truncation(precision: Precision, expected: int) -> None:
    metric = Metric("m", timestamp_ns=TS).add_field("v", 1)
    assert metric.timestamp(precision) == expected
    assert metric.to_line(precision).endswith(f" {expected}\n")


def test_repeat_encodes_are_identical() -> None:
    metric = Metric("user_logins").add_field("count", 1)
    first = metric.to_line(Precision.MILLISECOND)
    metric.to_line(Precision.NANOSECOND)
    assert metric.to_line(Precision.MILLISECOND) == first


def test_timestamp_captured_at_construction(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("influx_sdk.metric.time.time_ns", lambda: 5_000_000_000)
    metric = Metric("m").add_field("v", 1)
    monkeypatch.setattr("influx_sdk.metric.time.time_ns", lambda: 9_000_000_000)
    assert metric.to_line(Precision.SECOND) == "m v=1 5\n"


def test_invalid_metric_construction() -> None:
    with pytest.raises(ValueError):
        Metric("")
    with pytest.raises(ValueError):
        Metric("m", timestamp_ns=-1)


def test_precision_parse() -> None:
    assert Precision.parse("ms") is Precision.MILLISECOND
    assert Precision.parse("millisecond") is Precision.MILLISECOND
    assert Precision.parse("m") is Precision.MINUTE
    assert Precision.parse(" H ") is Precision.HOUR
    with pytest.raises(ValueError):
        Precision.parse("fortnight")


def test_boolean_tag_values_match_field_rendering() -> None:
    line = Metric("m", timestamp_ns=1).add_tag("up", True).add_tag("down", False).add_field("v", True)
    assert line.to_line(Precision.NANOSECOND) == "m,up=true,down=false v=true 1\n"


def test_none_field_value_is_rejected() -> None:
    metric = Metric("m", timestamp_ns=1)
    with pytest.raises(ValueError):
        metric.add_field("v", None)
    assert metric.fields == ()
