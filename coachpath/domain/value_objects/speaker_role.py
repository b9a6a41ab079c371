"""Speaker role value object."""

from enum import Enum


class SpeakerRole(Enum):
    """Who authored a message in a session."""
    SEEKER = "seeker"
    AGENT = "agent"
    PROVIDER = "provider"
