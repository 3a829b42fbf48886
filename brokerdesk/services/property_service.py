# brokerdesk/services/property_service.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import desc, update
from sqlalchemy.orm import Session

from ..domain.rules import validate_property_rooms
from ..errors import NotFound
from ..models import Appointment, Property
from ..schemas import PropertyCreate
from . import users
from .denormalization import PROPERTY_SNAPSHOT_FIELDS, apply_snapshot, broker_snapshot, fan_out_property
from .ownership import properties

log = logging.getLogger(__name__)


def create_property(db: Session, payload: PropertyCreate, *, owner_id: str) -> Property:
    validate_property_rooms(payload.type, payload.bedrooms, payload.bathrooms)

    broker = users.get_user_by_id(db, owner_id)
    if broker is None:
        raise NotFound("broker not found")

    row = Property(**payload.model_dump(), broker_id=owner_id, status="available")
    row.amenities = list(payload.amenities or [])
    apply_snapshot(row, broker_snapshot(broker))
    row = properties.add(db, row)

    log.info("property.create", extra={"event": "property.create", "user_id": owner_id, "entity_id": row.id})
    return row


def list_properties(db: Session, *, owner_id: str) -> list[Property]:
    return properties.list_for_owner(db, owner_id, order_by=desc(Property.created_at))


def get_property(db: Session, property_id: str, *, owner_id: str) -> Property:
    return properties.get(db, property_id, owner_id)


def update_property(db: Session, property_id: str, patch: dict[str, Any], *, owner_id: str) -> Property:
    row = properties.get(db, property_id, owner_id)

    # rooms rule applies to the state after the patch
    validate_property_rooms(
        patch.get("type", row.type),
        patch.get("bedrooms", row.bedrooms),
        patch.get("bathrooms", row.bathrooms),
    )

    for k, v in patch.items():
        setattr(row, k, v)

    if PROPERTY_SNAPSHOT_FIELDS & patch.keys():
        fan_out_property(db, row)

    row = properties.save(db, row)
    log.info("property.update", extra={"event": "property.update", "user_id": owner_id, "entity_id": row.id})
    return row


def delete_property(db: Session, property_id: str, *, owner_id: str) -> None:
    row = properties.get(db, property_id, owner_id)

    # appointments survive without their property
    db.execute(
        update(Appointment)
        .where(Appointment.property_id == row.id)
        .values(property_id=None, property_address=None),
        execution_options={"synchronize_session": "fetch"},
    )
    db.delete(row)
    properties.commit(db, action="delete")
    log.info("property.delete", extra={"event": "property.delete", "user_id": owner_id, "entity_id": property_id})
