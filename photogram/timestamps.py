from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from dateutil import parser as dateutil_parser
from dateutil.relativedelta import relativedelta

UNKNOWN_DATE = "Unknown date"
MORE_THAN_A_YEAR = "More than 1 year ago"

TimestampParser = Callable[[str], datetime]


def _strptime(fmt: str) -> TimestampParser:
    def _parse(value: str) -> datetime:
        return datetime.strptime(value, fmt)

    _parse.__name__ = f"strptime[{fmt}]"
    return _parse


def _iso(value: str) -> datetime:
    return datetime.fromisoformat(value)


def _generic(value: str) -> datetime:
    return dateutil_parser.parse(value)


# Tried in order; the first parser that returns a date wins.
TIMESTAMP_PARSERS: Sequence[TimestampParser] = (
    _strptime("%m/%d/%Y %H:%M:%S"),
    _iso,
    _strptime("%Y-%m-%d %H:%M:%S"),
    _generic,
)


def parse_timestamp(
    value: str | None,
    *,
    parsers: Sequence[TimestampParser] = TIMESTAMP_PARSERS,
) -> datetime | None:
    s = (value or "").strip()
    if not s:
        return None

    for parse in parsers:
        try:
            return parse(s)
        except (ValueError, OverflowError):
            continue
    return None


def _align(moment: datetime, now: datetime) -> tuple[datetime, datetime]:
    # Naive values are wall-clock local time.
    if (moment.tzinfo is None) == (now.tzinfo is None):
        return moment, now
    if moment.tzinfo is None:
        return moment.astimezone(), now
    return moment, now.astimezone()


def relative_label(moment: datetime, now: datetime) -> str:
    moment, now = _align(moment, now)
    seconds = (now - moment).total_seconds()

    minutes = int(seconds / 60)
    if minutes < 60:
        return f"{minutes}min ago"

    hours = int(seconds / 3600)
    if hours < 24:
        return f"{hours}h ago"

    days = int(seconds / 86400)
    if days < 30:
        return f"{days} days ago"

    delta = relativedelta(now, moment)
    months = delta.years * 12 + delta.months
    if months < 12:
        return f"{months} months ago"

    return MORE_THAN_A_YEAR


def format_relative(value: str | None, *, now: datetime | None = None) -> str:
    """
    Render a loosely formatted timestamp as a coarse age label.

    Returns UNKNOWN_DATE when the value is absent, no parser accepts it, or
    the date is too far out of range to compare.
    """
    moment = parse_timestamp(value)
    if moment is None:
        return UNKNOWN_DATE

    if now is None:
        now = datetime.now(moment.tzinfo)
    try:
        return relative_label(moment, now)
    except (ValueError, OverflowError, OSError):
        # Dates near datetime.min cannot be shifted into the local zone.
        return UNKNOWN_DATE


def sort_key(value: str | None) -> float | None:
    moment = parse_timestamp(value)
    if moment is None:
        return None
    try:
        if moment.tzinfo is None:
            moment = moment.astimezone()
        return moment.timestamp()
    except (ValueError, OverflowError, OSError):
        return None
