# brokerdesk/routers/clients.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..schemas import ClientCreate, ClientOut, ClientUpdate, patch_values
from ..services import client_service

router = APIRouter(prefix="/clients", tags=["clients"])


@router.post("", response_model=ClientOut, status_code=201)
def create_client(payload: ClientCreate, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return client_service.create_client(db, payload, owner_id=p.user_id)


@router.get("", response_model=list[ClientOut])
def list_clients(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return client_service.list_clients(db, owner_id=p.user_id)


@router.get("/{client_id}", response_model=ClientOut)
def get_client(client_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return client_service.get_client(db, client_id, owner_id=p.user_id)


@router.put("/{client_id}", response_model=ClientOut)
def update_client(
    client_id: str,
    payload: ClientUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    return client_service.update_client(db, client_id, patch_values(payload), owner_id=p.user_id)


@router.delete("/{client_id}")
def delete_client(client_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    client_service.delete_client(db, client_id, owner_id=p.user_id)
    return {"ok": True}
