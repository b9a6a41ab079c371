"""Request and response schemas for the HTTP API."""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ...application.dto import (
    CheckTrajectoryDTO,
    MessageDTO,
    ProgressIndicatorDTO,
    TrajectoryRuleDTO,
)

SpeakerRoleLiteral = Literal["seeker", "agent", "provider"]
IndicatorTypeLiteral = Literal["drift", "leap", "stall", "steady"]


class MessageSchema(BaseModel):
    """One message of the recent window."""
    
    role: SpeakerRoleLiteral
    content: str
    created_at: Optional[datetime] = None


class TrajectoryRuleSchema(BaseModel):
    """Provider-defined trajectory rule."""
    
    stage: str = ""
    indicator_type: IndicatorTypeLiteral
    pattern: str = ""
    message: str = ""


class TrajectoryCheckRequest(BaseModel):
    """Body of POST /trajectory-check."""
    
    model_config = ConfigDict(populate_by_name=True)
    
    session_id: str = Field(..., alias="sessionId", min_length=1)
    recent_messages: List[MessageSchema] = Field(..., alias="recentMessages")
    trajectory_rules: List[TrajectoryRuleSchema] = Field(..., alias="trajectoryRules")
    engagement_id: Optional[str] = Field(None, alias="engagementId")
    
    def to_dto(self) -> CheckTrajectoryDTO:
        """Convert request to application DTO."""
        return CheckTrajectoryDTO(
            session_id=self.session_id,
            recent_messages=[
                MessageDTO(role=msg.role, content=msg.content, created_at=msg.created_at)
                for msg in self.recent_messages
            ],
            trajectory_rules=[
                TrajectoryRuleDTO(
                    stage=rule.stage,
                    indicator_type=rule.indicator_type,
                    pattern=rule.pattern,
                    message=rule.message
                )
                for rule in self.trajectory_rules
            ],
            engagement_id=self.engagement_id
        )


class IndicatorResponse(BaseModel):
    """A progress indicator; id and created_at are null when unpersisted."""
    
    id: Optional[UUID] = None
    session_id: str
    engagement_id: Optional[str] = None
    type: str
    detail: Dict[str, Any]
    created_at: Optional[datetime] = None
    
    @classmethod
    def from_dto(cls, dto: ProgressIndicatorDTO) -> "IndicatorResponse":
        return cls(
            id=dto.id,
            session_id=dto.session_id,
            engagement_id=dto.engagement_id,
            type=dto.type,
            detail=dto.detail,
            created_at=dto.created_at
        )


class TrajectoryCheckResponse(BaseModel):
    """Result of one classification pass."""
    
    indicator: Optional[IndicatorResponse] = None
    matched: bool


class EngagementTrajectoryResponse(BaseModel):
    """Derived trajectory status of an engagement."""
    
    engagement_id: str
    status: str
    summary_status: str
    concerning_indicators: List[IndicatorResponse] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Error body."""
    
    error: str
