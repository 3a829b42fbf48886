# brokerdesk/auth.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException

from .errors import InvalidToken
from .services.token_service import TokenClaims, TokenService, get_token_service


@dataclass(frozen=True)
class Principal:
    user_id: str
    email: str
    role: str  # broker | channel_partner | admin


ROLES = ("broker", "channel_partner", "admin")


def _bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    scheme, _, token = str(authorization).partition(" ")
    token = token.strip()
    if scheme != "Bearer" or not token:
        raise HTTPException(status_code=401, detail="Authorization header must be in format: Bearer <token>")
    return token


# -------------------------
# get_token_claims / get_principal
# -------------------------
def get_token_claims(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """
    Request gate: no header -> 401, not `Bearer <token>` -> 401,
    token fails validation -> 401 with the reason.
    """
    token = _bearer_token(authorization)
    try:
        return tokens.validate(token)
    except InvalidToken as e:
        raise HTTPException(status_code=401, detail=e.message)


def get_principal(claims: TokenClaims = Depends(get_token_claims)) -> Principal:
    return Principal(user_id=claims.user_id, email=claims.email, role=claims.role)


def get_optional_principal(
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[Principal]:
    """Identity if a valid bearer token is present, otherwise None. Never rejects."""
    try:
        token = _bearer_token(authorization)
        claims = tokens.validate(token)
    except (HTTPException, InvalidToken):
        return None
    return Principal(user_id=claims.user_id, email=claims.email, role=claims.role)


def require_role(*roles: str) -> Callable[..., Principal]:
    """Dependency factory layered on get_principal: 403 unless the role is allowed."""
    allowed = frozenset(roles)
    unknown = allowed.difference(ROLES)
    if unknown:
        raise ValueError(f"unknown roles: {sorted(unknown)}")

    def _dep(p: Principal = Depends(get_principal)) -> Principal:
        if p.role not in allowed:
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return p

    return _dep


require_broker = require_role("broker")
require_channel_partner = require_role("channel_partner")
require_admin = require_role("admin")
