"""SQLAlchemy model for clock-in/clock-out records."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer

from ..db.session import Base


class TimeEntry(Base):
    """One tracking session. ``end_at`` stays NULL while the timer is running.

    Timestamps are naive UTC. At most one row per user may have a NULL
    ``end_at``; see ``app.db.migrate.ensure_open_entry_index``.
    """

    __tablename__ = "time_entries"
    __table_args__ = (Index("ix_time_entries_user_start", "user_id", "start_at"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=True)

    @property
    def is_open(self) -> bool:
        return self.end_at is None


__all__ = ["TimeEntry"]
