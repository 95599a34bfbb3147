from __future__ import annotations

from sqlalchemy.orm import Session

from ..models.app_settings import SINGLETON_ID, AppSettings
from ..services.timecalc import utcnow


def get_app_settings(db: Session) -> AppSettings:
    """Return the singleton settings row, creating it on first use."""

    row = db.get(AppSettings, SINGLETON_ID)
    if row is None:
        row = AppSettings(id=SINGLETON_ID, logo_path=None)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row


def get_logo_filename(db: Session) -> str | None:
    row = db.get(AppSettings, SINGLETON_ID)
    return row.logo_path if row is not None else None


def set_logo_filename(db: Session, filename: str | None) -> AppSettings:
    row = get_app_settings(db)
    row.logo_path = filename
    row.updated_at = utcnow()
    db.commit()
    db.refresh(row)
    return row
