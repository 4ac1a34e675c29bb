from __future__ import annotations

import logging
from typing import Annotated, Protocol, TypeVar

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.security import decode_token
from schemas.auth import CurrentUser


# --------------------------------------------------------------------------- #
# Common constants / helpers
# --------------------------------------------------------------------------- #
LOGGER = logging.getLogger(__name__)
BEARER = "Bearer"


def unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    """Return the canonical 401 response."""
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": BEARER},
    )


def not_found(detail: str = "Resource not found") -> HTTPException:
    """Return the canonical 404 response."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=detail,
    )


# auto_error=False lets optional-auth routes see "no credentials" as None
bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_credentials(credentials: HTTPAuthorizationCredentials) -> CurrentUser:
    # `decode_token` raises HTTPException(401) on failure
    token_data = decode_token(credentials.credentials)
    if not token_data.sub:
        LOGGER.debug("Token missing 'sub' claim")
        raise unauthorized()
    return CurrentUser(id=token_data.sub, email=token_data.email)


# --------------------------------------------------------------------------- #
# The dependencies
# --------------------------------------------------------------------------- #
async def get_current_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> CurrentUser:
    """
    Resolve the currently authenticated Supabase user from a Bearer JWT.

    Raises
    ------
    HTTPException(401)
        If the token is missing, malformed, expired, or has no subject.
    """
    if credentials is None or credentials.scheme.lower() != BEARER.lower():
        raise unauthorized("Not authenticated")
    return _user_from_credentials(credentials)


async def get_optional_user(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
) -> CurrentUser | None:
    """Resolve the caller when a Bearer token is supplied, else None.

    A token that is present but invalid is still rejected with 401 so a
    stale session is never silently treated as anonymous.
    """
    if credentials is None:
        return None
    return _user_from_credentials(credentials)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
OptionalUserDep = Annotated[CurrentUser | None, Depends(get_optional_user)]


# --------------------------------------------------------------------------- #
# Authorization helpers
# --------------------------------------------------------------------------- #


class HasUserIdProtocol(Protocol):
    """Protocol for database models that have a user_id field."""

    user_id: str


ResourceT = TypeVar("ResourceT", bound=HasUserIdProtocol)


def check_resource_access(
    resource: ResourceT | None,
    current_user: CurrentUser,
    *,
    not_found_message: str = "Resource not found",
) -> ResourceT:
    """Return the resource if the caller owns it.

    Missing and foreign resources both answer 404 so ownership of other
    users' vault entries is never revealed.
    """
    if resource is None or resource.user_id != current_user.id:
        raise not_found(not_found_message)
    return resource
