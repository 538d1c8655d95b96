"""
FastAPI dependencies for authentication and database sessions.
"""

import uuid
from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.database import get_db
from stemhub.kernel.identity.identity_service import IdentityService
from stemhub.kernel.identity.jwt import verify_access_token
from stemhub.kernel.models.user import User
from stemhub.logging_config import user_id_var


# Security scheme
security = HTTPBearer(auto_error=False)

DbSession = Annotated[AsyncSession, Depends(get_db)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
) -> User:
    """Get current authenticated user or raise 401."""
    if not credentials:
        raise _unauthorized("Not authenticated")
    
    payload = verify_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid or expired token")
    
    try:
        user_id = uuid.UUID(payload.sub)
    except ValueError:
        raise _unauthorized("Invalid or expired token")
    
    user = await IdentityService(db).get_user_by_id(user_id)
    if not user:
        raise _unauthorized("User not found")
    
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    user_id_var.set(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
