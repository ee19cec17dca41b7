"""Shared API dependencies for identity and common functionality."""

import uuid
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from litterpick.db.session import get_db

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_actor(
    x_user_id: Annotated[str | None, Header()] = None,
) -> uuid.UUID:
    """Return the caller's user id as forwarded by the identity provider.

    The gateway in front of this service authenticates the request and sets
    ``X-User-Id``; this dependency only parses it.

    Raises:
        HTTPException: If the header is missing or not a UUID
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    try:
        return uuid.UUID(x_user_id)
    except ValueError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate caller identity",
        ) from err


def get_email_verified(
    x_email_verified: Annotated[str | None, Header()] = None,
) -> bool:
    """Return the verified-email flag forwarded by the identity provider."""
    return (x_email_verified or "").strip().lower() in {"1", "true", "yes"}


# Type aliases for identity dependencies
CurrentActorDep = Annotated[uuid.UUID, Depends(get_current_actor)]
EmailVerifiedDep = Annotated[bool, Depends(get_email_verified)]
