"""Datetime helpers common to the simulator.

Currently provides:
    utc_now(): aware UTC "now", the default clock of a treasury session.
    parse_iso8601(s): robust ISO-8601 parser that always returns an *aware* UTC
        datetime instance. Accepts a trailing "Z", explicit offsets like
        "+00:00" or "-05:00" and fractional seconds.
    to_rfc3339_z(dt): render an aware datetime as RFC3339 with a "Z" suffix.
    format_local_time(dt): wall-clock "HH:MM:SS" in the local (or given) zone.

Keeping these here gives us a single spot to patch if behavior changes.
"""
from __future__ import annotations

import datetime as _dt
from typing import Optional, Union

from dateutil.parser import isoparse as _isoparse

__all__ = ["utc_now", "parse_iso8601", "to_rfc3339_z", "format_local_time"]


def utc_now() -> _dt.datetime:
    return _dt.datetime.now(tz=_dt.timezone.utc)


def _ensure_utc(dt: _dt.datetime) -> _dt.datetime:
    """Return *dt* converted to UTC and TZ-aware."""
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        # naive → assume already UTC
        return dt.replace(tzinfo=_dt.timezone.utc)
    return dt.astimezone(_dt.timezone.utc)


def parse_iso8601(value: Union[str, _dt.datetime]) -> _dt.datetime:
    """Parse *value* into a timezone-aware UTC datetime.

    Accepts ISO-8601 strings or datetime objects. If *value* is already a
    datetime, it will be normalised to UTC.
    """
    if isinstance(value, _dt.datetime):
        return _ensure_utc(value)

    if not isinstance(value, str):
        raise TypeError("parse_iso8601 expects str or datetime, got " + type(value).__name__)

    try:
        dt = _isoparse(value)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"invalid ISO-8601 datetime: {value}") from exc

    return _ensure_utc(dt)


def to_rfc3339_z(dt: _dt.datetime) -> str:
    return _ensure_utc(dt).isoformat().replace("+00:00", "Z")


def format_local_time(dt: _dt.datetime, tz: Optional[_dt.tzinfo] = None) -> str:
    """Render the wall-clock time of *dt* in *tz* (default: system local zone)."""
    return _ensure_utc(dt).astimezone(tz).strftime("%H:%M:%S")
