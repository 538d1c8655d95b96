"""
Typed errors raised by the engine.

Every failure the engine reports is one of these four kinds. Callers map
``kind`` to a transport status; the engine itself never does.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    VALIDATION = "validation"


class EngineError(Exception):
    """Base class for all engine errors."""
    
    kind: ErrorKind
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}
    
    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.message!r}>"


class NotFoundError(EngineError):
    """A referenced project, user, collaborator or resource does not exist."""
    
    kind = ErrorKind.NOT_FOUND
    
    def __init__(self, resource: str = "Resource", details: Optional[Dict[str, Any]] = None):
        super().__init__(f"{resource} not found", details)
        self.resource = resource


class ForbiddenError(EngineError):
    """The acting user lacks the required relationship or capability."""
    
    kind = ErrorKind.FORBIDDEN
    
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ConflictError(EngineError):
    """A business rule was violated (duplicate collaborator, owner protection)."""
    
    kind = ErrorKind.CONFLICT


class InputValidationError(EngineError):
    """Malformed input to a mutation, independent of authorization."""
    
    kind = ErrorKind.VALIDATION
