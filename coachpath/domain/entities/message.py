"""Session message domain entity."""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from ..value_objects import SpeakerRole


@dataclass(frozen=True)
class Message:
    """One utterance in a coaching session."""
    
    role: SpeakerRole
    content: str
    created_at: Optional[datetime] = None
    
    @property
    def is_seeker_message(self) -> bool:
        """Check if message is from the seeker."""
        return self.role == SpeakerRole.SEEKER
    
    def get_message_length(self) -> int:
        """Get message content length in characters."""
        return len(self.content)
    
    def to_prompt_dict(self) -> Dict[str, str]:
        """Role and content only, as sent to the classification service."""
        return {"role": self.role.value, "content": self.content}
