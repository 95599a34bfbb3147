"""CRUD helpers for the per-user clock-in/clock-out state machine.

A user is either *idle* (no open entry) or *running* (exactly one entry whose
``end_at`` is NULL). ``start_entry`` and ``stop_entry`` are the only
transitions; everything else is a read-side aggregation computed against
"now" at query time.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import AlreadyRunning, NoRunningEntry
from ..models.time_entry import TimeEntry
from ..services.timecalc import (
    elapsed_seconds,
    local_day,
    local_day_bounds,
    sum_by_day,
    to_naive_utc,
    utcnow,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 7


def _now(now: datetime | None) -> datetime:
    return to_naive_utc(now) if now is not None else utcnow()


def get_open_entry(db: Session, user_id: int) -> TimeEntry | None:
    stmt = (
        select(TimeEntry)
        .where(TimeEntry.user_id == user_id, TimeEntry.end_at.is_(None))
        .order_by(desc(TimeEntry.id))
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def start_entry(db: Session, user_id: int, now: datetime | None = None) -> TimeEntry:
    if get_open_entry(db, user_id) is not None:
        raise AlreadyRunning()
    entry = TimeEntry(user_id=user_id, start_at=_now(now))
    db.add(entry)
    try:
        db.commit()
    except IntegrityError as exc:
        # A concurrent start won the race; the partial unique index refused ours.
        db.rollback()
        raise AlreadyRunning() from exc
    db.refresh(entry)
    logger.info("timer.started", extra={"extra_data": {"user_id": user_id, "entry_id": entry.id}})
    return entry


def stop_entry(db: Session, user_id: int, now: datetime | None = None) -> tuple[TimeEntry, int]:
    """Close the most recent open entry and return it with its length in seconds."""

    entry = get_open_entry(db, user_id)
    if entry is None:
        raise NoRunningEntry()
    entry.end_at = _now(now)
    db.commit()
    db.refresh(entry)
    seconds = elapsed_seconds(entry.start_at, entry.end_at)
    logger.info(
        "timer.stopped",
        extra={"extra_data": {"user_id": user_id, "entry_id": entry.id, "seconds": seconds}},
    )
    return entry, seconds


def list_entries(db: Session, user_id: int, limit: int = 100, offset: int = 0):
    stmt = (
        select(TimeEntry)
        .where(TimeEntry.user_id == user_id)
        .order_by(desc(TimeEntry.start_at), desc(TimeEntry.id))
        .limit(limit)
        .offset(offset)
    )
    return db.execute(stmt).scalars().all()


def _entries_between(db: Session, user_id: int, start: datetime, end: datetime):
    stmt = select(TimeEntry).where(
        TimeEntry.user_id == user_id,
        TimeEntry.start_at >= start,
        TimeEntry.start_at < end,
    )
    return db.execute(stmt).scalars().all()


def today_summary(db: Session, user_id: int, now: datetime | None = None) -> dict[str, object]:
    current = _now(now)
    today = local_day(current, settings.TZ)
    start, end = local_day_bounds(today, settings.TZ)
    totals = sum_by_day(_entries_between(db, user_id, start, end), current, settings.TZ)
    return {
        "total_seconds": totals.get(today, 0),
        "running": get_open_entry(db, user_id) is not None,
    }


def clamp_days(days: int | None) -> int:
    if days is None:
        return DEFAULT_HISTORY_DAYS
    return max(1, min(int(days), settings.HISTORY_MAX_DAYS))


def history(db: Session, user_id: int, days: int | None = None, now: datetime | None = None) -> list[dict[str, object]]:
    """Per-day totals for the trailing ``days`` days (today included), newest first.

    Days without any entry are omitted.
    """

    current = _now(now)
    window = clamp_days(days)
    today = local_day(current, settings.TZ)
    first_day = today - timedelta(days=window - 1)
    start, _ = local_day_bounds(first_day, settings.TZ)
    _, end = local_day_bounds(today, settings.TZ)
    totals = sum_by_day(_entries_between(db, user_id, start, end), current, settings.TZ)
    return [
        {"day": day.isoformat(), "total_seconds": totals[day]}
        for day in sorted(totals, reverse=True)
    ]
