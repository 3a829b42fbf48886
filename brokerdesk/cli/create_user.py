# brokerdesk/cli/create_user.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from brokerdesk.db import SessionLocal
from brokerdesk.errors import EmailExists
from brokerdesk.models import User
from brokerdesk.services import users
from brokerdesk.services.auth_service import hash_password


@dataclass(frozen=True)
class CreatedUser:
    user_id: str
    email: str
    role: str
    created: bool


def create_user(
    *,
    email: str,
    password: str,
    role: str,
    first_name: str,
    last_name: str,
    firm_name: str = "BrokerDesk",
    city: str = "",
    date_of_birth: Optional[date] = None,
) -> CreatedUser:
    """
    Creates a user directly in the credential store.

    This is the only way to create admins; signup accepts broker and
    channel_partner only. An existing email is reported, not overwritten.
    """
    db = SessionLocal()
    try:
        existing = users.get_user_by_email(db, email)
        if existing is not None:
            return CreatedUser(user_id=existing.id, email=existing.email, role=existing.role, created=False)

        row = User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=hash_password(password),
            date_of_birth=date_of_birth,
            firm_name=firm_name,
            role=role,
            whatsapp_number="",
            address="",
            location=city,
            city=city,
            state="",
            postal_code="",
            is_verified=True,
        )
        try:
            row = users.create_user(db, row)
        except EmailExists:
            # inactive user holding the address
            raise SystemExit(f"email already registered: {email}")
        return CreatedUser(user_id=row.id, email=row.email, role=row.role, created=True)
    finally:
        db.close()
