from __future__ import annotations

from fastapi import Depends, Header, Request
from fastapi.security.utils import get_authorization_scheme_param
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from ..core.errors import Unauthorized
from ..core.security import decode_token
from ..crud.users import get_user
from ..db.session import get_db
from ..middlewares import principal_ctx_var
from ..models.user import User


def _set_principal(request: Request, principal: str) -> None:
    principal_ctx_var.set(principal)
    request.state.principal = principal


def bearer_token(authorization: str | None) -> str:
    scheme, credentials = get_authorization_scheme_param(authorization or "")
    if not authorization:
        raise Unauthorized("Authorization required")
    if scheme.lower() != "bearer" or not credentials:
        raise Unauthorized("Invalid authorization header")
    return credentials


async def require_user(
    request: Request,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the ``Authorization: Bearer <jwt>`` header to a stored user or fail with 401.

    Runs on the event loop so the principal set here is inherited by the
    endpoint and shows up in every log line it emits.
    """

    token = bearer_token(authorization)
    try:
        payload = decode_token(token)
    except ValueError as exc:
        raise Unauthorized(str(exc)) from exc
    user = await run_in_threadpool(get_user, db, payload.user_id)
    if user is None:
        raise Unauthorized("Unknown user")
    _set_principal(request, f"user:{user.id}")
    request.state.token_payload = payload
    return user
