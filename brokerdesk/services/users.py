# brokerdesk/services/users.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import exists, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import EmailExists, InternalError, NotFound
from ..models import User
from .denormalization import BROKER_SNAPSHOT_FIELDS, fan_out_broker

log = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def email_exists(db: Session, email: str) -> bool:
    # includes inactive users: an address is never reusable
    return bool(db.scalar(select(exists().where(User.email == normalize_email(email)))))


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == normalize_email(email), User.is_active.is_(True)))


def get_user_by_id(db: Session, user_id: str) -> User | None:
    return db.scalar(select(User).where(User.id == str(user_id), User.is_active.is_(True)))


def create_user(db: Session, user: User) -> User:
    user.email = normalize_email(user.email)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost the check-then-insert race against a concurrent signup
        db.rollback()
        raise EmailExists()
    except SQLAlchemyError:
        db.rollback()
        log.exception("user insert failed")
        raise InternalError("failed to create user")
    db.refresh(user)
    return user


def update_profile_image(db: Session, user_id: str, image_ref: str) -> None:
    try:
        res = db.execute(update(User).where(User.id == str(user_id)).values(profile_image=image_ref))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("profile image update failed", extra={"user_id": user_id})
        raise InternalError("failed to update profile image")
    if res.rowcount == 0:
        raise InternalError("failed to update profile image")


def update_user(db: Session, user_id: str, patch: dict[str, Any]) -> User:
    """
    Partial profile update.

    When the display name or city changes, every client, property and
    appointment owned by the user is re-stamped in the same commit.
    """
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFound("user not found")

    for k, v in patch.items():
        setattr(user, k, v)

    try:
        if BROKER_SNAPSHOT_FIELDS & patch.keys():
            fan_out_broker(db, user)
        db.add(user)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        log.exception("user update failed", extra={"user_id": user_id})
        raise InternalError("failed to update user")

    db.refresh(user)
    return user
