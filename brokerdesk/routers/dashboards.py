# brokerdesk/routers/dashboards.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from ..auth import Principal, require_admin, require_broker, require_channel_partner

router = APIRouter(tags=["dashboards"])


@router.get("/broker/dashboard")
def broker_dashboard(p: Principal = Depends(require_broker)):
    return {"message": "Broker dashboard", "user_id": p.user_id}


@router.get("/channel-partner/dashboard")
def channel_partner_dashboard(p: Principal = Depends(require_channel_partner)):
    return {"message": "Channel Partner dashboard", "user_id": p.user_id}


@router.get("/admin/dashboard")
def admin_dashboard(p: Principal = Depends(require_admin)):
    return {"message": "Admin dashboard", "user_id": p.user_id}
