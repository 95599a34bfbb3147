"""Registration and sign-in endpoints (email/password and Google ID tokens)."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.errors import ValidationError
from ..core.rate_limit import limiter
from ..core.security import issue_access_token
from ..crud.users import authenticate, get_or_create_external_user, register_user
from ..db.session import get_db
from ..deps.auth import require_user
from ..models.user import User
from ..schemas.auth import (
    GoogleLoginRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    TokenResponse,
    UserOut,
)
from ..services.google_identity import verify_google_id_token

# No postponed annotations in this module: FastAPI reads the hints of the
# slowapi-wrapped login handler at runtime.

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=MessageResponse, summary="Create an account")
def api_register(payload: RegisterRequest, db: Session = Depends(get_db)):
    register_user(db, payload.email, payload.password, payload.full_name)
    return MessageResponse(message="Registered")


@router.post("/login", response_model=TokenResponse, summary="Exchange email/password for a bearer token")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
def api_login(request: Request, payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate(db, payload.email, payload.password)
    return TokenResponse(token=issue_access_token(user.id, user.email))


@router.post("/google", response_model=TokenResponse, summary="Exchange a Google ID token for a bearer token")
def api_google_login(payload: GoogleLoginRequest, db: Session = Depends(get_db)):
    id_token = (payload.id_token or "").strip()
    if not id_token:
        raise ValidationError("idToken is required")
    identity = verify_google_id_token(id_token)
    user = get_or_create_external_user(db, identity.email, identity.name)
    return TokenResponse(token=issue_access_token(user.id, user.email))


@router.get("/me", response_model=UserOut)
def api_me(user: User = Depends(require_user)):
    return UserOut.model_validate(user)
