# brokerdesk/services/ownership.py
from __future__ import annotations

import logging
from typing import Any, Generic, Type, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import InternalError, NotFound
from ..models import Appointment, Client, Property

log = logging.getLogger(__name__)

T = TypeVar("T", Client, Property, Appointment)


class OwnedRepository(Generic[T]):
    """
    Storage access for rows that belong to exactly one broker.

    Lookups go by id only; the owner comparison happens afterwards, and a row
    owned by someone else is reported exactly like a missing one.
    """

    def __init__(self, model: Type[T], label: str):
        self.model = model
        self.label = label

    def not_found(self) -> NotFound:
        return NotFound(f"{self.label} not found")

    def get(self, db: Session, entity_id: str, owner_id: str) -> T:
        row = db.get(self.model, str(entity_id))
        if row is None or row.broker_id != owner_id:
            raise self.not_found()
        return row

    def list_for_owner(self, db: Session, owner_id: str, *criteria: Any, order_by: Any = None) -> list[T]:
        q = select(self.model).where(self.model.broker_id == owner_id, *criteria)
        if order_by is not None:
            q = q.order_by(*order_by) if isinstance(order_by, (list, tuple)) else q.order_by(order_by)
        return list(db.scalars(q).all())

    def add(self, db: Session, row: T) -> T:
        db.add(row)
        self.commit(db, action="create")
        db.refresh(row)
        return row

    def save(self, db: Session, row: T) -> T:
        db.add(row)
        self.commit(db, action="update")
        db.refresh(row)
        return row

    def delete(self, db: Session, entity_id: str, owner_id: str) -> None:
        row = self.get(db, entity_id, owner_id)
        db.delete(row)
        self.commit(db, action="delete")

    def commit(self, db: Session, *, action: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            log.exception(
                "%s %s failed",
                self.label,
                action,
                extra={"entity_type": self.model.__name__},
            )
            raise InternalError(f"failed to {action} {self.label}")


clients = OwnedRepository(Client, "client")
properties = OwnedRepository(Property, "property")
appointments = OwnedRepository(Appointment, "appointment")
