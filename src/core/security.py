"""Verification of Supabase-issued access tokens.

Sign-in (magic link, OAuth, PKCE exchange) happens between the browser and
Supabase; the API only receives the resulting access token as a Bearer
credential and validates it with the project's JWT secret.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from fastapi import HTTPException, status
from jose import JWTError, jwt

from core.config import Settings, get_settings
from schemas.auth import TokenData


def _settings() -> Settings:  # lazy accessor to allow tests to set env first
    return get_settings()


# Module logger for security helpers
_logger = logging.getLogger(__name__)


def _credentials_exception(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(
    data: dict[str, Any], expires_delta: timedelta | None = None
) -> str:
    """Encode a Supabase-compatible JWT with `sub`, `aud` and expiry.

    Production tokens are minted by Supabase; this helper exists for local
    tooling and tests that need a token the API will accept.
    """
    s = _settings()
    if not s.SUPABASE_JWT_SECRET:
        raise RuntimeError("SUPABASE_JWT_SECRET is not configured")
    to_encode = data.copy()
    expire = datetime.now(UTC) + (expires_delta or timedelta(minutes=30))
    to_encode.setdefault("aud", s.SUPABASE_JWT_AUDIENCE)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, s.SUPABASE_JWT_SECRET, algorithm=s.JWT_ALGORITHM)


def decode_token(token: str) -> TokenData:
    """Decode and validate a Supabase JWT, returning TokenData or raising 401.

    Expects a `sub` claim (the Supabase user id). `email` and `role` are
    carried through when present.
    """
    s = _settings()
    if not s.SUPABASE_JWT_SECRET:
        _logger.warning("SUPABASE_JWT_SECRET not configured; rejecting token")
        raise _credentials_exception()
    try:
        payload = jwt.decode(
            token,
            s.SUPABASE_JWT_SECRET,
            algorithms=[s.JWT_ALGORITHM],
            audience=s.SUPABASE_JWT_AUDIENCE,
        )
    except JWTError as err:
        raise _credentials_exception() from err

    sub = payload.get("sub")
    if sub is None:
        raise _credentials_exception("Token missing subject")
    email = payload.get("email")
    return TokenData(
        sub=str(sub),
        email=str(email) if email else None,
        role=str(payload.get("role") or "authenticated"),
    )
