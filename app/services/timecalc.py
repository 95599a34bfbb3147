from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterable, Protocol
from zoneinfo import ZoneInfo


class _Span(Protocol):
    start_at: datetime
    end_at: datetime | None


def utcnow() -> datetime:
    """Current instant as a naive UTC datetime, the form stored in the database."""
    return datetime.now(tz=timezone.utc).replace(tzinfo=None)


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive values; convert aware values to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_naive_utc(dt: datetime) -> datetime:
    return as_utc(dt).replace(tzinfo=None)


def elapsed_seconds(start: datetime, end: datetime) -> int:
    """Return whole seconds between start and end (non-negative)."""
    delta = int((as_utc(end) - as_utc(start)).total_seconds())
    return max(delta, 0)


def local_day(dt: datetime, tz: str) -> date:
    """Calendar day of ``dt`` as seen in ``tz``."""
    return as_utc(dt).astimezone(ZoneInfo(tz)).date()


def local_day_bounds(day: date, tz: str) -> tuple[datetime, datetime]:
    """Naive UTC ``[start, end)`` covering local midnight to local midnight."""
    zone = ZoneInfo(tz)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return to_naive_utc(start), to_naive_utc(end)


def span_seconds(span: _Span, now: datetime) -> int:
    """Duration of a span; an open span is measured up to ``now``."""
    return elapsed_seconds(span.start_at, span.end_at or now)


def sum_by_day(spans: Iterable[_Span], now: datetime, tz: str) -> dict[date, int]:
    """
    Bucket spans by the local calendar day they *started* on.
    Open spans count up to ``now`` and are never split across midnight.
    """
    totals: dict[date, int] = defaultdict(int)
    for span in spans:
        totals[local_day(span.start_at, tz)] += span_seconds(span, now)
    return dict(totals)
