"""Rider authentication context.

The fare calculation only needs one thing from authentication: the rider's
age. A request without credentials is an anonymous rider, represented by
ANONYMOUS_AGE, which disables age discounts.
"""

from collections.abc import Mapping
from typing import Any

import structlog
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from subway.core.config import require_config, settings

logger = structlog.get_logger(__name__)

ANONYMOUS_AGE = -1
AGE_CLAIM = "age"

# Optional bearer scheme: missing credentials mean an anonymous rider
optional_security = HTTPBearer(auto_error=False)


def verify_access_token(token: str) -> dict[str, Any]:
    """
    Verify a rider access token and return its claims.

    Args:
        token: Encoded JWT

    Returns:
        JWT payload dictionary

    Raises:
        ValueError: If AUTH_JWT_SECRET is not configured
        HTTPException: 401 if the token is invalid or expired
    """
    require_config("AUTH_JWT_SECRET")

    options = {"verify_aud": settings.AUTH_JWT_AUDIENCE is not None}
    try:
        return jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=settings.AUTH_JWT_ALGORITHMS,
            audience=settings.AUTH_JWT_AUDIENCE,
            options=options,
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication credentials: {e!s}",
        ) from e


def get_rider_age(principal: Mapping[str, Any] | None) -> int:
    """
    Extract the rider's age from an authenticated principal.

    The age claim is usually string-encoded ("15") but plain integers are accepted.

    Args:
        principal: Token claims, or None when nobody is authenticated

    Returns:
        Age in years, or ANONYMOUS_AGE when there is no principal

    Raises:
        HTTPException: 401 if the principal has no usable age claim

    Examples:
        >>> get_rider_age(None)
        -1
        >>> get_rider_age({"sub": "rider-1", "age": "15"})
        15
    """
    if not principal:
        return ANONYMOUS_AGE

    raw_age = principal.get(AGE_CLAIM)
    try:
        # bool is an int subclass but never a valid age
        if isinstance(raw_age, bool):
            raise ValueError(raw_age)
        # Plain decimal digits only: no sign, underscores or non-ASCII digits
        text = str(raw_age).strip()
        if not (text.isascii() and text.isdigit()):
            raise ValueError(raw_age)
        age = int(text)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token has invalid '{AGE_CLAIM}' claim",
        ) from e
    return age


def get_rider_age_from_token(token: str | None) -> int:
    """
    Resolve the rider's age from an optional access token.

    Args:
        token: Encoded JWT, or None for an anonymous rider

    Returns:
        Age in years, or ANONYMOUS_AGE
    """
    if not token:
        return ANONYMOUS_AGE
    age = get_rider_age(verify_access_token(token))
    logger.debug("rider_age_resolved", age=age)
    return age


async def get_current_rider_age(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_security),
) -> int:
    """
    Dependency resolving the current rider's age from the bearer token.

    Args:
        credentials: Optional HTTP Bearer credentials

    Returns:
        Age in years, or ANONYMOUS_AGE when no credentials were sent
    """
    if credentials is None:
        return ANONYMOUS_AGE
    return get_rider_age_from_token(credentials.credentials)
