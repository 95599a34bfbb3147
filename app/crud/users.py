"""CRUD helpers for user accounts: registration, password login and Google sign-in."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import Conflict, Unauthorized
from ..core.security import hash_password, unusable_password_hash, verify_password
from ..models.user import User

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    stmt = select(User).where(User.email == normalize_email(email))
    return db.execute(stmt).scalars().first()


def _insert_user(db: Session, user: User) -> User:
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Email exists") from exc
    db.refresh(user)
    return user


def register_user(db: Session, email: str, password: str, full_name: str) -> User:
    email = normalize_email(email)
    if get_user_by_email(db, email) is not None:
        raise Conflict("Email exists")
    user = _insert_user(
        db,
        User(email=email, password_hash=hash_password(password), full_name=(full_name or "").strip()),
    )
    logger.info("user.registered", extra={"extra_data": {"user_id": user.id}})
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("login.failed")
        raise Unauthorized("Invalid credentials")
    logger.info("login.succeeded", extra={"extra_data": {"user_id": user.id}})
    return user


def get_or_create_external_user(db: Session, email: str, full_name: str | None = None) -> User:
    """Map a verified external identity to a local account, provisioning one if needed.

    New accounts get a random password hash, so only the external provider can
    sign them in until the user sets a password.
    """

    user = get_user_by_email(db, email)
    if user is not None:
        return user
    try:
        user = _insert_user(
            db,
            User(
                email=normalize_email(email),
                password_hash=unusable_password_hash(),
                full_name=(full_name or "").strip(),
            ),
        )
    except Conflict:
        # Another request provisioned the same email first.
        user = get_user_by_email(db, email)
        if user is None:
            raise
        return user
    logger.info("user.provisioned", extra={"extra_data": {"user_id": user.id, "provider": "google"}})
    return user
