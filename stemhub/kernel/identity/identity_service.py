"""
Identity lookups used by the collaboration engine.
"""

import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stemhub.kernel.errors import NotFoundError
from stemhub.kernel.models.user import User


def normalize_email(email: str) -> str:
    return email.lower().strip()


class IdentityService:
    """
    Resolve users by id or email.

    The engine never sees credentials; it only needs to know which account an
    invite email or a verified token subject refers to.
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        query = select(User).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email (case-insensitive)."""
        query = select(User).where(User.email == normalize_email(email))
        result = await self.session.execute(query)
        return result.scalar_one_or_none()
    
    async def resolve_user_by_email(self, email: str) -> User:
        """
        Get the active account behind an email.
        
        Raises:
            NotFoundError: no active user has this email
        """
        user = await self.get_user_by_email(email)
        if user is None or not user.is_active:
            raise NotFoundError("User", {"email": normalize_email(email)})
        return user
    
    async def create_user(
        self,
        email: str,
        display_name: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> User:
        """
        Register an account record mirrored from the identity provider.
        
        Raises:
            ValueError: If email already exists
        """
        existing = await self.get_user_by_email(email)
        if existing:
            raise ValueError("Email already registered")
        
        user = User(
            email=normalize_email(email),
            display_name=display_name.strip() if display_name else None,
            avatar=avatar,
        )
        self.session.add(user)
        await self.session.flush()
        return user
