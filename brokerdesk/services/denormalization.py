# brokerdesk/services/denormalization.py
"""
Display copies of owner/client/property fields kept on dependent rows.

Every function here only stages statements on the caller's session; the
caller commits them together with the update that made them necessary.
"""
from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import update
from sqlalchemy.orm import Session

from ..models import Appointment, Client, Property, User

BROKER_SNAPSHOT_FIELDS = frozenset({"first_name", "last_name", "city"})
CLIENT_SNAPSHOT_FIELDS = frozenset({"first_name", "last_name", "phone"})
PROPERTY_SNAPSHOT_FIELDS = frozenset({"address"})

BROKER_OWNED = (Client, Property, Appointment)


def broker_snapshot(user: User) -> dict[str, Any]:
    return {"broker_name": user.display_name, "broker_city": user.city}


def client_snapshot(client: Client) -> dict[str, Any]:
    return {"client_name": client.full_name, "client_phone": client.phone}


def property_snapshot(prop: Optional[Property]) -> dict[str, Any]:
    return {"property_address": prop.address if prop is not None else None}


def apply_snapshot(row: Any, snapshot: dict[str, Any]) -> None:
    for k, v in snapshot.items():
        setattr(row, k, v)


def fan_out_broker(db: Session, user: User) -> None:
    snap = broker_snapshot(user)
    for model in BROKER_OWNED:
        db.execute(
            update(model).where(model.broker_id == user.id).values(**snap),
            execution_options={"synchronize_session": "fetch"},
        )


def fan_out_client(db: Session, client: Client) -> None:
    db.execute(
        update(Appointment).where(Appointment.client_id == client.id).values(**client_snapshot(client)),
        execution_options={"synchronize_session": "fetch"},
    )


def fan_out_property(db: Session, prop: Property) -> None:
    db.execute(
        update(Appointment).where(Appointment.property_id == prop.id).values(**property_snapshot(prop)),
        execution_options={"synchronize_session": "fetch"},
    )
