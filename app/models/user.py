"""SQLAlchemy model for the people who track their time."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String, func

from ..db.session import Base


class User(Base):
    """An account identified by email; owns an unbounded history of time entries."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(190), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(190), nullable=False, default="")
    created_at = Column(DateTime, nullable=False, server_default=func.now())


__all__ = ["User"]
