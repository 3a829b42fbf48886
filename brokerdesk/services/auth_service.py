# brokerdesk/services/auth_service.py
from __future__ import annotations

import base64
import hashlib
import hmac
import logging
import secrets
from typing import Any

from sqlalchemy.orm import Session

from ..config import settings
from ..domain.rules import parse_date_of_birth
from ..errors import EmailExists, InternalError, InvalidCredentials, NotFound
from ..models import User
from ..schemas import SignupRequest
from . import users
from .token_service import TokenClaims, TokenService

log = logging.getLogger(__name__)

HASH_ALGO = "pbkdf2_sha256"


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str, iterations: int | None = None) -> str:
    iters = int(iterations or settings.password_hash_iterations)
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iters)
    return f"{HASH_ALGO}${iters}${base64.b64encode(salt).decode()}${base64.b64encode(dk).decode()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        algo, iters_s, salt_b64, dk_b64 = stored.split("$", 3)
        if algo != HASH_ALGO:
            return False
        iters = int(iters_s)
        salt = base64.b64decode(salt_b64.encode())
        dk = base64.b64decode(dk_b64.encode())
    except (ValueError, AttributeError):
        return False
    test = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iters)
    return hmac.compare_digest(test, dk)


# A real hash to compare against when the email is unknown, so a miss costs
# the same as a wrong password.
_DUMMY_HASH: str | None = None


def _dummy_hash() -> str:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_password(secrets.token_urlsafe(16))
    return _DUMMY_HASH


# -------------------------
# Signup / login
# -------------------------
def signup(db: Session, tokens: TokenService, payload: SignupRequest) -> tuple[str, User]:
    email = users.normalize_email(payload.email)
    if users.email_exists(db, email):
        raise EmailExists()

    dob = parse_date_of_birth(payload.date_of_birth)

    try:
        password_hash = hash_password(payload.password)
    except (ValueError, TypeError):
        log.exception("password hashing failed")
        raise InternalError("failed to hash password")

    data: dict[str, Any] = payload.model_dump(exclude={"email", "password", "date_of_birth"})
    user = User(**data, email=email, password_hash=password_hash, date_of_birth=dob)
    user = users.create_user(db, user)

    token = tokens.issue(user.id, user.email, user.role)
    log.info("auth.signup", extra={"event": "auth.signup", "user_id": user.id})
    return token, user


def login(db: Session, tokens: TokenService, *, email: str, password: str) -> tuple[str, User]:
    user = users.get_user_by_email(db, email)
    if user is None:
        verify_password(password, _dummy_hash())
        log.info("auth.login_failed", extra={"event": "auth.login_failed"})
        raise InvalidCredentials()

    if not verify_password(password, user.password_hash):
        log.info("auth.login_failed", extra={"event": "auth.login_failed", "user_id": user.id})
        raise InvalidCredentials()

    token = tokens.issue(user.id, user.email, user.role)
    log.info("auth.login", extra={"event": "auth.login", "user_id": user.id})
    return token, user


def get_user(db: Session, user_id: str) -> User:
    user = users.get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("user not found")
    return user


def refresh_token(db: Session, tokens: TokenService, claims: TokenClaims) -> tuple[str, User]:
    # the token alone says nothing about liveness, so re-check the user first
    user = get_user(db, claims.user_id)
    return tokens.refresh(claims), user


def update_profile_image(db: Session, user_id: str, image_ref: str) -> None:
    users.update_profile_image(db, user_id, image_ref)


def update_profile(db: Session, user_id: str, patch: dict[str, Any]) -> User:
    user = users.update_user(db, user_id, patch)
    log.info("user.update", extra={"event": "user.update", "user_id": user.id})
    return user
