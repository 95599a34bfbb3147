from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..crud.time_entries import (
    DEFAULT_HISTORY_DAYS,
    history,
    list_entries,
    start_entry,
    stop_entry,
    today_summary,
)
from ..db.session import get_db
from ..deps.auth import require_user
from ..models.user import User
from ..schemas.time import (
    DayTotal,
    HistoryResponse,
    StartResponse,
    StopResponse,
    TimeEntryOut,
    TodayResponse,
)
from ..services.timecalc import span_seconds, utcnow

router = APIRouter(prefix="/time", tags=["time"])


@router.post("/start", response_model=StartResponse)
def api_start(user: User = Depends(require_user), db: Session = Depends(get_db)):
    start_entry(db, user.id)
    return StartResponse()


@router.post("/end", response_model=StopResponse)
def api_end(user: User = Depends(require_user), db: Session = Depends(get_db)):
    _, seconds = stop_entry(db, user.id)
    return StopResponse(seconds=seconds)


@router.get("/today", response_model=TodayResponse)
def api_today(user: User = Depends(require_user), db: Session = Depends(get_db)):
    return TodayResponse(**today_summary(db, user.id))


@router.get("/history", response_model=HistoryResponse)
def api_history(
    days: int = Query(default=DEFAULT_HISTORY_DAYS, ge=1),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    rows = history(db, user.id, days)
    return HistoryResponse(history=[DayTotal(**row) for row in rows])


@router.get("/entries", response_model=list[TimeEntryOut])
def api_entries(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(require_user),
    db: Session = Depends(get_db),
):
    now = utcnow()
    return [
        TimeEntryOut(id=e.id, start_at=e.start_at, end_at=e.end_at, seconds=span_seconds(e, now))
        for e in list_entries(db, user.id, limit=limit, offset=offset)
    ]
