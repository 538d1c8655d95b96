"""
JWT access-token handling.

Tokens are minted by the identity provider. We verify them and read the
subject; ``create_access_token`` exists for tests and local tooling.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict

from stemhub.config import get_settings


class AccessTokenPayload(BaseModel):
    """JWT access token payload."""
    
    model_config = ConfigDict(from_attributes=True)
    
    sub: str  # User ID
    email: Optional[str] = None
    exp: datetime
    iat: datetime
    jti: str
    type: str = "access"
    
    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


class JWTManager:
    """Access token creation and verification."""
    
    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        access_token_expire_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.access_token_expire_minutes = (
            access_token_expire_minutes or settings.access_token_expire_minutes
        )
    
    def create_access_token(
        self,
        user_id: uuid.UUID,
        email: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime, str]:
        """
        Create a new access token.
        
        Returns:
            Tuple of (token, expiration_datetime, token_id)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))
        jti = str(uuid.uuid4())
        
        payload = {
            "sub": str(user_id),
            "email": email,
            "exp": expire,
            "iat": now,
            "jti": jti,
            "type": "access",
        }
        
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expire, jti
    
    def verify_access_token(self, token: str) -> Optional[AccessTokenPayload]:
        """
        Decode and check an access token.
        
        Returns:
            The payload, or None when the token is invalid, expired, not an
            access token, or has a malformed subject
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None
        
        if payload.get("type") != "access":
            return None
        
        try:
            uuid.UUID(str(payload.get("sub")))
            return AccessTokenPayload(**payload)
        except (TypeError, ValueError):
            return None


def create_access_token(user_id: uuid.UUID, email: Optional[str] = None) -> str:
    """Create an access token with default settings."""
    token, _, _ = JWTManager().create_access_token(user_id, email)
    return token


def verify_access_token(token: str) -> Optional[AccessTokenPayload]:
    """Verify an access token with default settings."""
    return JWTManager().verify_access_token(token)
