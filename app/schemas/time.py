"""Pydantic schemas for the timer endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class StartResponse(BaseModel):
    message: str = "Started"


class StopResponse(BaseModel):
    message: str = "Stopped"
    seconds: int


class TodayResponse(BaseModel):
    total_seconds: int
    running: bool


class DayTotal(BaseModel):
    day: str = Field(..., description="Local calendar day, YYYY-MM-DD")
    total_seconds: int


class HistoryResponse(BaseModel):
    history: list[DayTotal] = Field(default_factory=list)


class TimeEntryOut(BaseModel):
    id: int
    start_at: datetime
    end_at: Optional[datetime] = None
    seconds: int

    model_config = ConfigDict(from_attributes=True)
