"""
Identity Core - user lookup and access-token verification.

Passwords and token issuance belong to the identity provider; this package
only turns an email or a bearer credential into a user.
"""

from stemhub.kernel.identity.jwt import (
    AccessTokenPayload,
    JWTManager,
    create_access_token,
    verify_access_token,
)
from stemhub.kernel.identity.identity_service import IdentityService

__all__ = [
    "AccessTokenPayload",
    "JWTManager",
    "create_access_token",
    "verify_access_token",
    "IdentityService",
]
