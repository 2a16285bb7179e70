import datetime as _dt

import pytest

from common.datetime import format_local_time, parse_iso8601, to_rfc3339_z, utc_now

UTC = _dt.timezone.utc
SWEEP_TS = _dt.datetime(2025, 8, 6, 10, 37, 1, tzinfo=UTC)


@pytest.mark.parametrize(
    "s,expected",
    [
        # audit export column as written by to_rfc3339_z
        ("2025-08-06T10:37:01Z", SWEEP_TS),
        ("2025-08-06T10:37:01+00:00", SWEEP_TS),
        # local-offset input normalised back to the sweep instant
        ("2025-08-06T05:37:01-05:00", SWEEP_TS),
        ("2025-08-06T10:37:01.250000Z", SWEEP_TS.replace(microsecond=250_000)),
    ],
)
def test_parse_iso8601(s, expected):
    assert parse_iso8601(s) == expected


@pytest.mark.parametrize("dt", [SWEEP_TS, SWEEP_TS.replace(microsecond=123_456)])
def test_export_timestamp_round_trip(dt):
    assert parse_iso8601(to_rfc3339_z(dt)) == dt


def test_parse_datetime_roundtrip():
    dt = _dt.datetime(2025, 1, 1, 0, 0, tzinfo=UTC)
    assert parse_iso8601(dt) is dt  # same object when already UTC-aware


def test_parse_rejects_garbage():
    with pytest.raises(ValueError):
        parse_iso8601("not-a-date")
    with pytest.raises(TypeError):
        parse_iso8601(123)  # type: ignore[arg-type]


def test_rfc3339_and_local_time():
    dt = _dt.datetime(2025, 8, 6, 10, 37, 1, tzinfo=UTC)
    assert to_rfc3339_z(dt) == "2025-08-06T10:37:01Z"
    assert format_local_time(dt, _dt.timezone(_dt.timedelta(hours=-5))) == "05:37:01"
    assert utc_now().tzinfo is UTC
