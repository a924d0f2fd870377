"""Bearer tokens for the dashboard API.

Tokens are HS256 JWTs issued by ``kafka-lens`` itself; the subject names the
operator and the optional ``roles`` claim is carried through untouched.
Nothing here imports FastAPI, so it can be tested in isolation.
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional

from jose import JWTError, jwt  # python-jose

from kafkalens.core.config import Settings, get_settings
from kafkalens.core.exceptions import ErrorCode, KafkaLensError

ISSUER = "kafka-lens"


class TokenValidationError(KafkaLensError):
    """Missing, malformed, expired or foreign bearer token."""

    code = ErrorCode.UNAUTHORIZED


def create_access_token(
    subject: str,
    *,
    roles: Iterable[str] = (),
    expires_delta: timedelta | None = None,
    settings: Optional[Settings] = None,
) -> str:
    """Return a signed token for *subject*."""
    s = settings or get_settings()
    now = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": subject,
        "iss": ISSUER,
        "iat": now,
        "exp": now + (expires_delta or timedelta(minutes=s.access_token_expire_minutes)),
    }
    roles = list(roles)
    if roles:
        claims["roles"] = roles
    return jwt.encode(claims, s.jwt_secret, algorithm=s.jwt_algorithm)


def decode_jwt(token: str, settings: Optional[Settings] = None) -> Dict[str, Any]:
    """Validate *token* and return its claims.

    Raises
    ------
    TokenValidationError
        Bad signature, expired, not issued by kafka-lens, or no subject.
    """
    s = settings or get_settings()
    try:
        return jwt.decode(
            token,
            s.jwt_secret,
            algorithms=[s.jwt_algorithm],
            issuer=ISSUER,
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as exc:
        raise TokenValidationError(f"Invalid bearer token: {exc}") from exc
