"""Tests for pm_common.datetime_utils."""
from datetime import datetime, timedelta, timezone

from src.pm_common.datetime_utils import parse_timestamp, utc_now


def test_utc_now_is_aware() -> None:
    assert utc_now().tzinfo is not None


def test_parse_z_suffix() -> None:
    assert parse_timestamp("2025-01-01T00:00:00Z") == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_parse_offset_converted_to_utc() -> None:
    parsed = parse_timestamp("2025-01-01T02:00:00+02:00")
    assert parsed == datetime(2025, 1, 1, tzinfo=timezone.utc)
    assert parsed.utcoffset() == timedelta(0)


def test_naive_taken_as_utc() -> None:
    assert parse_timestamp(datetime(2025, 1, 1)) == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_unparseable_is_none() -> None:
    assert parse_timestamp("yesterday") is None
    assert parse_timestamp("") is None
    assert parse_timestamp(None) is None
    assert parse_timestamp(12345) is None
