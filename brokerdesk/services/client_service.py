# brokerdesk/services/client_service.py
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..domain.rules import validate_budget_range
from ..errors import NotFound
from ..models import Client
from ..schemas import ClientCreate
from . import users
from .denormalization import CLIENT_SNAPSHOT_FIELDS, apply_snapshot, broker_snapshot, fan_out_client
from .ownership import clients

log = logging.getLogger(__name__)


def create_client(db: Session, payload: ClientCreate, *, owner_id: str) -> Client:
    validate_budget_range(payload.budget_min, payload.budget_max)

    broker = users.get_user_by_id(db, owner_id)
    if broker is None:
        raise NotFound("broker not found")

    row = Client(**payload.model_dump(), broker_id=owner_id, status="active")
    apply_snapshot(row, broker_snapshot(broker))
    row = clients.add(db, row)

    log.info("client.create", extra={"event": "client.create", "user_id": owner_id, "entity_id": row.id})
    return row


def list_clients(db: Session, *, owner_id: str) -> list[Client]:
    return clients.list_for_owner(db, owner_id, order_by=desc(Client.created_at))


def get_client(db: Session, client_id: str, *, owner_id: str) -> Client:
    return clients.get(db, client_id, owner_id)


def update_client(db: Session, client_id: str, patch: dict[str, Any], *, owner_id: str) -> Client:
    row = clients.get(db, client_id, owner_id)

    validate_budget_range(patch.get("budget_min"), patch.get("budget_max"))
    # a one-sided patch must still agree with the stored bound
    validate_budget_range(patch.get("budget_min", row.budget_min), patch.get("budget_max", row.budget_max))

    for k, v in patch.items():
        setattr(row, k, v)

    if CLIENT_SNAPSHOT_FIELDS & patch.keys():
        fan_out_client(db, row)

    row = clients.save(db, row)
    log.info("client.update", extra={"event": "client.update", "user_id": owner_id, "entity_id": row.id})
    return row


def delete_client(db: Session, client_id: str, *, owner_id: str) -> None:
    # appointments for the client go with it (relationship cascade)
    clients.delete(db, client_id, owner_id)
    log.info("client.delete", extra={"event": "client.delete", "user_id": owner_id, "entity_id": client_id})
