"""Google ID token verification.

Tokens are verified locally: the RS256 signature is checked against Google's
published signing keys, which are fetched with httpx and cached for as long as
Google's ``Cache-Control`` header allows.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Any

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

from ..core.config import settings
from ..core.errors import ServiceUnavailable, Unauthorized, ValidationError

logger = logging.getLogger(__name__)

GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}
DEFAULT_CERTS_MAX_AGE = 3600
_MAX_AGE_RE = re.compile(r"max-age=(\d+)")


class GoogleSignInNotConfigured(ServiceUnavailable):
    message = "Google sign-in is not configured"


@dataclass(frozen=True)
class GoogleIdentity:
    subject: str
    email: str
    name: str = ""


def _ensure_configured() -> str:
    client_id = (settings.GOOGLE_CLIENT_ID or "").strip()
    if not client_id:
        raise GoogleSignInNotConfigured()
    return client_id


def _fetch_google_certs() -> tuple[dict[str, Any], int]:
    """Download Google's JWK set; returns ``(jwks, max_age_seconds)``."""

    timeout = httpx.Timeout(6.0)
    try:
        with httpx.Client(timeout=timeout) as client:
            response = client.get(settings.GOOGLE_CERTS_URL)
            response.raise_for_status()
            jwks = response.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("Fetching Google signing keys failed: %s", exc)
        raise ServiceUnavailable("Google sign-in is unavailable") from exc
    match = _MAX_AGE_RE.search(response.headers.get("cache-control", ""))
    max_age = int(match.group(1)) if match else DEFAULT_CERTS_MAX_AGE
    return jwks, max_age


class GoogleCertCache:
    """Process-wide cache of Google's signing keys."""

    def __init__(self) -> None:
        self._jwks: dict[str, Any] | None = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def get(self, kid: str | None = None) -> dict[str, Any]:
        with self._lock:
            stale = self._jwks is None or time.monotonic() >= self._expires_at
            # An unknown key id means Google rotated keys before our copy expired.
            if not stale and kid and kid not in self._kids():
                stale = True
            if stale:
                jwks, max_age = _fetch_google_certs()
                self._jwks = jwks
                self._expires_at = time.monotonic() + max_age
            return self._jwks

    def clear(self) -> None:
        with self._lock:
            self._jwks = None
            self._expires_at = 0.0

    def _kids(self) -> set[str]:
        return {key.get("kid") for key in (self._jwks or {}).get("keys", [])}


google_certs = GoogleCertCache()


def identity_from_claims(claims: dict[str, Any], client_id: str) -> GoogleIdentity:
    """Check audience/issuer of already-decoded claims and pull out the identity."""

    if claims.get("aud") != client_id:
        logger.warning("Google token issued for a different audience")
        raise Unauthorized("Invalid Google token")
    if claims.get("iss") not in GOOGLE_ISSUERS:
        raise Unauthorized("Invalid Google token")
    email = (claims.get("email") or "").strip()
    if not email:
        raise ValidationError("Google account has no email")
    if str(claims.get("email_verified", "true")).lower() != "true":
        raise Unauthorized("Google email is not verified")
    return GoogleIdentity(subject=str(claims.get("sub") or ""), email=email, name=claims.get("name") or "")


def verify_google_id_token(id_token: str) -> GoogleIdentity:
    client_id = _ensure_configured()
    try:
        header = jwt.get_unverified_header(id_token)
    except JWTError as exc:
        raise Unauthorized("Invalid Google token") from exc
    jwks = google_certs.get(header.get("kid"))
    try:
        claims = jwt.decode(
            id_token,
            jwks,
            algorithms=["RS256"],
            audience=client_id,
            options={"verify_at_hash": False},
        )
    except ExpiredSignatureError as exc:
        raise Unauthorized("Google token expired") from exc
    except JWTError as exc:
        logger.info("Rejected Google token: %s", exc)
        raise Unauthorized("Invalid Google token") from exc
    return identity_from_claims(claims, client_id)
