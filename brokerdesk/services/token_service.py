# brokerdesk/services/token_service.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from ..config import settings
from ..errors import InvalidToken

# Only the HMAC family is ever accepted. The header is checked before the
# signature so an RS*/ES*/none token can never be verified with the shared secret.
ALLOWED_ALGORITHMS = ("HS256", "HS384", "HS512")
REQUIRED_CLAIMS = ["exp", "iat", "nbf", "iss", "sub"]


@dataclass(frozen=True)
class TokenClaims:
    user_id: str
    email: str
    role: str
    issued_at: datetime
    not_before: datetime
    expires_at: datetime
    issuer: str


def _ts(value: Any) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class TokenService:
    """
    Issues and validates signed, time-limited identity tokens.

    Validation is purely cryptographic/temporal: nothing here touches the
    database, so a token stays valid for its whole window even if the user is
    deactivated. There is no revocation list.
    """

    def __init__(self, secret: str, ttl: timedelta, issuer: str, algorithm: str = "HS256"):
        if not secret:
            raise ValueError("token secret is required")
        if algorithm not in ALLOWED_ALGORITHMS:
            raise ValueError(f"unsupported signing algorithm: {algorithm}")
        self._secret = secret
        self._ttl = ttl
        self._issuer = issuer
        self._algorithm = algorithm

    def issue(self, user_id: str, email: str, role: str) -> str:
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "user_id": str(user_id),
            "email": str(email),
            "role": str(role),
            "iat": now,
            "nbf": now,
            "exp": now + self._ttl,
            "iss": self._issuer,
            "sub": str(user_id),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def validate(self, token: str) -> TokenClaims:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError:
            raise InvalidToken("malformed token")

        alg = header.get("alg")
        if alg not in ALLOWED_ALGORITHMS:
            raise InvalidToken(f"unexpected signing method: {alg}")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=list(ALLOWED_ALGORITHMS),
                issuer=self._issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken("token expired")
        except jwt.ImmatureSignatureError:
            raise InvalidToken("token not yet valid")
        except jwt.InvalidSignatureError:
            raise InvalidToken("invalid signature")
        except jwt.InvalidIssuerError:
            raise InvalidToken("invalid issuer")
        except jwt.MissingRequiredClaimError as e:
            raise InvalidToken(f"token missing {e.claim} claim")
        except jwt.InvalidTokenError:
            raise InvalidToken("malformed token")

        # a token is dead at exactly iat + ttl
        if datetime.now(timezone.utc).timestamp() >= int(payload["exp"]):
            raise InvalidToken("token expired")

        user_id = payload.get("user_id")
        role = payload.get("role")
        if not user_id or not role or str(user_id) != str(payload.get("sub")):
            raise InvalidToken("invalid token claims")

        return TokenClaims(
            user_id=str(user_id),
            email=str(payload.get("email") or ""),
            role=str(role),
            issued_at=_ts(payload["iat"]),
            not_before=_ts(payload["nbf"]),
            expires_at=_ts(payload["exp"]),
            issuer=str(payload["iss"]),
        )

    def refresh(self, claims: TokenClaims) -> str:
        """New token for the same identity with a fresh expiry."""
        return self.issue(claims.user_id, claims.email, claims.role)


def get_token_service() -> TokenService:
    return TokenService(
        secret=settings.jwt_secret,
        ttl=timedelta(minutes=int(settings.jwt_exp_minutes)),
        issuer=settings.jwt_issuer,
    )
