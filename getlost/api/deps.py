"""API dependencies for authentication and common operations."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from getlost.core.exceptions import AuthenticationError, NotFoundError
from getlost.core.permissions import Actor, UserRole
from getlost.core.security import verify_token
from getlost.database import get_db
from getlost.models.user import Agency, User

__all__ = ["get_db", "get_current_user", "get_current_actor"]

# Security scheme
security = HTTPBearer()


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Get the current authenticated user from JWT token."""
    payload = verify_token(credentials.credentials, token_type="access")
    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    try:
        user = await db.get(User, int(user_id))
    except ValueError:
        raise AuthenticationError("Invalid token subject")

    if not user:
        raise AuthenticationError("User not found")

    return user


async def get_current_actor(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Actor:
    """Resolve the current user into an actor with role and agency."""
    try:
        role = UserRole(current_user.role)
    except ValueError:
        raise AuthenticationError(f"Unknown role '{current_user.role}'")

    agency_id = None
    if role == UserRole.AGENCY:
        result = await db.execute(select(Agency.id).where(Agency.user_id == current_user.id))
        agency_id = result.scalar_one_or_none()
        if agency_id is None:
            raise NotFoundError("Agency profile")

    return Actor(user_id=current_user.id, role=role, agency_id=agency_id)


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
DbSession = Annotated[AsyncSession, Depends(get_db)]
