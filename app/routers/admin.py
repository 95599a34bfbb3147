"""Admin endpoints for the site logo."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import NotFound, ValidationError
from ..db.session import get_db
from ..deps.auth import require_user
from ..schemas.admin import LogoResponse, LogoUploadResponse
from ..services.logo import current_logo_url, replace_logo

router = APIRouter(tags=["admin"])


@router.get("/admin/logo", response_model=LogoResponse)
def api_get_logo(db: Session = Depends(get_db)):
    return LogoResponse(logo_url=current_logo_url(db))


@router.post(
    "/admin/logo",
    response_model=LogoUploadResponse,
    dependencies=[Depends(require_user)],
)
def api_set_logo(file: UploadFile | None = File(default=None), db: Session = Depends(get_db)):
    if file is None or not (file.filename or "").strip():
        raise ValidationError("No file uploaded")
    try:
        url = replace_logo(db, file.filename, file.content_type, file.file)
    finally:
        file.file.close()
    return LogoUploadResponse(logo_url=url)


@router.get("/" + settings.DEFAULT_LOGO_NAME, include_in_schema=False)
def default_logo():
    path = settings.STATIC_DIR / settings.DEFAULT_LOGO_NAME
    if not path.is_file():
        raise NotFound("Logo not found")
    return FileResponse(path)
