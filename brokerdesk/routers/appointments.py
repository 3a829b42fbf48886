# brokerdesk/routers/appointments.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import Principal, get_principal
from ..db import get_db
from ..schemas import (
    AppointmentCreate,
    AppointmentOut,
    AppointmentStatsOut,
    AppointmentStatus,
    AppointmentType,
    AppointmentUpdate,
    patch_values,
)
from ..services import appointment_service
from ..services.appointment_service import AppointmentFilters

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentOut, status_code=201)
def create_appointment(
    payload: AppointmentCreate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    return appointment_service.create_appointment(db, payload, owner_id=p.user_id)


@router.get("", response_model=list[AppointmentOut])
def list_appointments(
    status: Optional[AppointmentStatus] = Query(default=None),
    on_date: Optional[date] = Query(default=None, alias="date"),
    type: Optional[AppointmentType] = Query(default=None),
    client_id: Optional[str] = Query(default=None),
    start_date: Optional[date] = Query(default=None),
    end_date: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    filters = AppointmentFilters(
        status=status,
        date=on_date,
        type=type,
        client_id=client_id,
        start_date=start_date,
        end_date=end_date,
    )
    return appointment_service.list_appointments(db, owner_id=p.user_id, filters=filters)


@router.get("/stats", response_model=AppointmentStatsOut)
def appointment_stats(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return appointment_service.appointment_stats(db, owner_id=p.user_id)


@router.get("/{appointment_id}", response_model=AppointmentOut)
def get_appointment(appointment_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return appointment_service.get_appointment(db, appointment_id, owner_id=p.user_id)


@router.put("/{appointment_id}", response_model=AppointmentOut)
def update_appointment(
    appointment_id: str,
    payload: AppointmentUpdate,
    db: Session = Depends(get_db),
    p: Principal = Depends(get_principal),
):
    return appointment_service.update_appointment(db, appointment_id, patch_values(payload), owner_id=p.user_id)


@router.delete("/{appointment_id}")
def delete_appointment(appointment_id: str, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    appointment_service.delete_appointment(db, appointment_id, owner_id=p.user_id)
    return {"ok": True}
