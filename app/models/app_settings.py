from __future__ import annotations

from sqlalchemy import Column, DateTime, Integer, String

from ..db.session import Base

SINGLETON_ID = 1


class AppSettings(Base):
    """Singleton row (``id == 1``) with site-wide settings such as the logo."""

    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True, default=SINGLETON_ID)
    # Filename only, relative to ``settings.UPLOADS_DIR``.
    logo_path = Column(String(255), nullable=True)
    updated_at = Column(DateTime, nullable=True)


__all__ = ["AppSettings", "SINGLETON_ID"]
