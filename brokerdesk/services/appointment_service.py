# brokerdesk/services/appointment_service.py
from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..errors import InvalidReference, NotFound
from ..models import Appointment, Client, Property
from ..schemas import AppointmentCreate, AppointmentStatsOut
from . import users
from .denormalization import apply_snapshot, broker_snapshot, client_snapshot, property_snapshot
from .ownership import appointments

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppointmentFilters:
    status: Optional[str] = None
    date: Optional[date] = None
    type: Optional[str] = None
    client_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def criteria(self) -> list[Any]:
        out: list[Any] = []
        if self.status is not None:
            out.append(Appointment.status == self.status)
        if self.date is not None:
            out.append(Appointment.date == self.date)
        if self.type is not None:
            out.append(Appointment.type == self.type)
        if self.client_id is not None:
            out.append(Appointment.client_id == self.client_id)
        if self.start_date is not None:
            out.append(Appointment.date >= self.start_date)
        if self.end_date is not None:
            out.append(Appointment.date <= self.end_date)
        return out


# -------------------------
# Cross-reference checks
# -------------------------
def _owned_client(db: Session, client_id: str, owner_id: str) -> Client:
    row = db.get(Client, str(client_id))
    if row is None:
        raise InvalidReference("invalid client_id: client not found")
    if row.broker_id != owner_id:
        raise InvalidReference("client does not belong to broker")
    return row


def _owned_property(db: Session, property_id: str, owner_id: str) -> Property:
    row = db.get(Property, str(property_id))
    if row is None:
        raise InvalidReference("invalid property_id: property not found")
    if row.broker_id != owner_id:
        raise InvalidReference("property does not belong to broker")
    return row


# -------------------------
# CRUD
# -------------------------
def create_appointment(db: Session, payload: AppointmentCreate, *, owner_id: str) -> Appointment:
    client = _owned_client(db, payload.client_id, owner_id)
    prop = _owned_property(db, payload.property_id, owner_id) if payload.property_id else None

    broker = users.get_user_by_id(db, owner_id)
    if broker is None:
        raise NotFound("broker not found")

    row = Appointment(
        title=payload.title,
        description=payload.description,
        date=payload.date,
        time=payload.time,
        client_id=client.id,
        property_id=prop.id if prop is not None else None,
        broker_id=owner_id,
        type=payload.type,
        status="scheduled",
    )
    apply_snapshot(row, client_snapshot(client))
    apply_snapshot(row, property_snapshot(prop))
    apply_snapshot(row, broker_snapshot(broker))
    row = appointments.add(db, row)

    log.info("appointment.create", extra={"event": "appointment.create", "user_id": owner_id, "entity_id": row.id})
    return row


def list_appointments(db: Session, *, owner_id: str, filters: AppointmentFilters | None = None) -> list[Appointment]:
    filters = filters or AppointmentFilters()
    return appointments.list_for_owner(
        db,
        owner_id,
        *filters.criteria(),
        order_by=(Appointment.date.asc(), Appointment.time.asc()),
    )


def get_appointment(db: Session, appointment_id: str, *, owner_id: str) -> Appointment:
    return appointments.get(db, appointment_id, owner_id)


def update_appointment(db: Session, appointment_id: str, patch: dict[str, Any], *, owner_id: str) -> Appointment:
    row = appointments.get(db, appointment_id, owner_id)

    # resolve references before mutating anything
    client = None
    if patch.get("client_id"):
        client = _owned_client(db, patch["client_id"], owner_id)

    detach_property = "property_id" in patch and patch["property_id"] == ""
    prop = None
    if patch.get("property_id"):
        prop = _owned_property(db, patch["property_id"], owner_id)

    for k, v in patch.items():
        if k in ("client_id", "property_id"):
            continue
        setattr(row, k, v)

    if client is not None:
        row.client_id = client.id
        apply_snapshot(row, client_snapshot(client))
    if prop is not None:
        row.property_id = prop.id
        apply_snapshot(row, property_snapshot(prop))
    elif detach_property:
        row.property_id = None
        apply_snapshot(row, property_snapshot(None))

    row = appointments.save(db, row)
    log.info("appointment.update", extra={"event": "appointment.update", "user_id": owner_id, "entity_id": row.id})
    return row


def delete_appointment(db: Session, appointment_id: str, *, owner_id: str) -> None:
    appointments.delete(db, appointment_id, owner_id)
    log.info("appointment.delete", extra={"event": "appointment.delete", "user_id": owner_id, "entity_id": appointment_id})


# -------------------------
# Stats
# -------------------------
def appointment_stats(db: Session, *, owner_id: str, today: date | None = None) -> AppointmentStatsOut:
    today = today or date.today()
    month_start = today.replace(day=1)
    month_end = today.replace(day=calendar.monthrange(today.year, today.month)[1])

    def _count(*criteria: Any) -> int:
        q = select(func.count(Appointment.id)).where(Appointment.broker_id == owner_id, *criteria)
        return int(db.scalar(q) or 0)

    by_status = dict(
        db.execute(
            select(Appointment.status, func.count(Appointment.id))
            .where(Appointment.broker_id == owner_id)
            .group_by(Appointment.status)
        ).all()
    )
    by_type = dict(
        db.execute(
            select(Appointment.type, func.count(Appointment.id))
            .where(Appointment.broker_id == owner_id)
            .group_by(Appointment.type)
        ).all()
    )

    return AppointmentStatsOut(
        total_this_month=_count(Appointment.date >= month_start, Appointment.date <= month_end),
        today_appointments=_count(Appointment.date == today),
        scheduled_appointments=int(by_status.get("scheduled", 0)),
        completed_appointments=int(by_status.get("completed", 0)),
        cancelled_appointments=int(by_status.get("cancelled", 0)),
        appointments_by_type={str(k): int(v) for k, v in by_type.items()},
    )
