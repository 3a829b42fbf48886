# brokerdesk/routers/properties.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..schemas import PropertyCreate, PropertyOut, PropertyUpdate, patch_values
from ..services import property_service

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post("", response_model=PropertyOut, status_code=201)
def create_property(payload: PropertyCreate, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return property_service.create_property(db, payload, owner_id=p.user_id)


@router.get("", response_model=list[PropertyOut])
def list_properties(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return property_service.list_properties(db, owner_id=p.user_id)


@router.get("/{property_id}", response_model=PropertyOut)
def get_property(property_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return property_service.get_property(db, property_id, owner_id=p.user_id)


@router.put("/{property_id}", response_model=PropertyOut)
def update_property(
    property_id: str,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    return property_service.update_property(db, property_id, patch_values(payload), owner_id=p.user_id)


@router.delete("/{property_id}")
def delete_property(property_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    property_service.delete_property(db, property_id, owner_id=p.user_id)
    return {"ok": True}
