# brokerdesk/routers/auth.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..auth import Principal, get_optional_principal, get_principal, get_token_claims
from ..db import get_db
from ..schemas import AuthOut, LoginRequest, SignupRequest, UserOut, UserUpdate, patch_values
from ..services import auth_service
from ..services.token_service import TokenClaims, TokenService, get_token_service


router = APIRouter(prefix="/auth", tags=["auth"])

log = logging.getLogger(__name__)


@router.post("/signup", response_model=AuthOut, status_code=201)
def signup(
    payload: SignupRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    token, user = auth_service.signup(db, tokens, payload)
    return AuthOut(token=token, user=UserOut.model_validate(user))


@router.post("/login", response_model=AuthOut)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    token, user = auth_service.login(db, tokens, email=payload.email, password=payload.password)
    return AuthOut(token=token, user=UserOut.model_validate(user))


@router.post("/logout")
def logout(p: Optional[Principal] = Depends(get_optional_principal)):
    # Tokens are stateless; the client just drops it.
    log.info("auth.logout", extra={"event": "auth.logout", "user_id": p.user_id if p else None})
    return {"ok": True, "message": "Logged out successfully"}


@router.get("/me", response_model=UserOut)
def me(db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return auth_service.get_user(db, p.user_id)


@router.patch("/me", response_model=UserOut)
def update_me(payload: UserUpdate, db: Session = Depends(get_db), p: Principal = Depends(get_principal)):
    return auth_service.update_profile(db, p.user_id, patch_values(payload))


@router.post("/refresh", response_model=AuthOut)
def refresh(
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_token_claims),
    tokens: TokenService = Depends(get_token_service),
):
    token, user = auth_service.refresh_token(db, tokens, claims)
    return AuthOut(token=token, user=UserOut.model_validate(user))
