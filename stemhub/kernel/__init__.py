"""
Kernel Layer

The authorization and collaboration permission engine:
- Data models (projects, collaborators, versioned stems/segments)
- Identity lookups (who is this email / token)
- Permission core (role defaults, access classification, capability gate)
- Stores over the async SQLAlchemy session
"""

from stemhub.kernel.errors import (
    ConflictError,
    EngineError,
    ErrorKind,
    ForbiddenError,
    InputValidationError,
    NotFoundError,
)

__all__ = [
    "ConflictError",
    "EngineError",
    "ErrorKind",
    "ForbiddenError",
    "InputValidationError",
    "NotFoundError",
]
