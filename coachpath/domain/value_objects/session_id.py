"""Session ID value object."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SessionId:
    """Value object for opaque chat session identifiers."""
    
    value: str
    
    def __post_init__(self) -> None:
        """Validate session ID."""
        if not isinstance(self.value, str):
            raise ValueError("Session ID must be a string")
        
        if not self.value.strip():
            raise ValueError("Session ID must not be empty")
    
    def __str__(self) -> str:
        """String representation."""
        return self.value
    
    @classmethod
    def from_raw(cls, value: Any) -> "SessionId":
        """Create SessionId from an untrusted request value."""
        if value is None:
            raise ValueError("Session ID is required")
        
        return cls(value)
