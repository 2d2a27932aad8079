"""
Meeting start times: conversion into the meeting's own time zone, rounding
to a tidy hour boundary, and the lookback window check.

Zoom reports ``start_time`` in UTC and the meeting's IANA zone separately.
Recordings are filed under the local wall-clock time of the meeting, so
everything downstream works on the converted value.
"""

from datetime import timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import dateutil.parser as parser

from fetcher_errors import InvalidTimestamp, InvalidTimeZone

# Calls starting within this many minutes of the hour are filed on the hour.
FUDGE_MINUTES = 5

DATE_KEY_FORMAT = "%Y-%m-%d"
TIME_KEY_FORMAT = "%H.%M"


def load_zone(timezone_name):
    if not isinstance(timezone_name, str) or not timezone_name.strip():
        raise InvalidTimeZone(f"missing time zone: {timezone_name!r}")
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise InvalidTimeZone(f"unknown time zone '{timezone_name}'") from e


def parse_start_time(start_time_utc):
    """Parse an RFC 3339 timestamp. The offset is mandatory."""
    if not isinstance(start_time_utc, str):
        raise InvalidTimestamp(f"invalid timestamp: {start_time_utc!r}")
    try:
        parsed = parser.isoparse(start_time_utc)
    except (ValueError, OverflowError) as e:
        raise InvalidTimestamp(f"invalid timestamp '{start_time_utc}': {e}") from e

    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise InvalidTimestamp(f"timestamp '{start_time_utc}' has no UTC offset")
    return parsed


def to_local_time(start_time_utc, timezone_name):
    zone = load_zone(timezone_name)
    return parse_start_time(start_time_utc).astimezone(zone)


def round_to_hour(local_time):
    """
    Round a time like 09:58 to 10:00, or 10:03 to 10:00.

    Times more than FUDGE_MINUTES away from the hour are returned unchanged,
    seconds included. Rounding up adds one elapsed hour, so across a DST
    change 01:57 EST becomes 03:00 EDT.
    """
    minute = local_time.minute
    on_the_hour = local_time.replace(minute=0, second=0, microsecond=0)

    if minute >= 60 - FUDGE_MINUTES:
        if on_the_hour.tzinfo is None:
            return on_the_hour + timedelta(hours=1)
        next_hour = on_the_hour.astimezone(timezone.utc) + timedelta(hours=1)
        return next_hour.astimezone(local_time.tzinfo)
    if minute <= FUDGE_MINUTES:
        return on_the_hour
    return local_time


def normalize(start_time_utc, timezone_name):
    return round_to_hour(to_local_time(start_time_utc, timezone_name))


def date_key(local_time):
    return local_time.strftime(DATE_KEY_FORMAT)


def time_key(local_time):
    return local_time.strftime(TIME_KEY_FORMAT)


def in_range(local_time, lookback_days, reference_now):
    """
    True if ``local_time`` is strictly after ``reference_now`` minus
    ``lookback_days`` days.

    Days are 24 elapsed hours, whatever DST does in between. A naive
    ``reference_now`` is taken to already be in the meeting's zone.
    """
    zone = local_time.tzinfo
    if reference_now.tzinfo is None or zone is None:
        now = reference_now.replace(tzinfo=zone)
    else:
        now = reference_now.astimezone(timezone.utc)

    cutoff = now - timedelta(days=lookback_days)
    return local_time > cutoff
