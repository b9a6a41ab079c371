"""Trajectory DTOs for application layer."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID


@dataclass
class MessageDTO:
    """DTO for one message of the recent window."""
    
    role: str
    content: str
    created_at: Optional[datetime] = None


@dataclass
class TrajectoryRuleDTO:
    """DTO for a provider-defined trajectory rule."""
    
    stage: str
    indicator_type: str
    pattern: str
    message: str


@dataclass
class CheckTrajectoryDTO:
    """DTO for a trajectory classification request."""
    
    session_id: str
    recent_messages: List[MessageDTO]
    trajectory_rules: List[TrajectoryRuleDTO]
    engagement_id: Optional[str] = None


@dataclass
class ProgressIndicatorDTO:
    """DTO for a progress indicator.
    
    ``id`` and ``created_at`` are None when the indicator was computed but not
    persisted.
    """
    
    id: Optional[UUID]
    session_id: str
    engagement_id: Optional[str]
    type: str
    detail: Dict[str, Any]
    created_at: Optional[datetime]


@dataclass
class TrajectoryCheckResultDTO:
    """DTO for the outcome of a classification pass."""
    
    indicator: Optional[ProgressIndicatorDTO]
    matched: bool
    # Second-tier outcome, when that tier ran. Not exposed over HTTP.
    classification: Optional[Any] = None


@dataclass
class EngagementTrajectoryDTO:
    """DTO for an engagement's derived trajectory status."""
    
    engagement_id: str
    status: str
    summary_status: str
    concerning_indicators: List[ProgressIndicatorDTO] = field(default_factory=list)
