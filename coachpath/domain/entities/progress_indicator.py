"""Progress indicator domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from ..value_objects import IndicatorType, IndexedRule


HEURISTIC_REPETITION_MESSAGE = (
    "I notice you've been circling back to the same topic. "
    "Let's explore what might be keeping you there."
)
HEURISTIC_STALL_MESSAGE = (
    "It seems like we're at a standstill. "
    "What's one small step you could take to move forward?"
)
HEURISTIC_DISENGAGEMENT_MESSAGE = "I'm sensing some distance. What's on your mind right now?"

FALLBACK_RULE_MESSAGE = "Let's explore what's happening in your journey right now."
FALLBACK_RULE_PATTERN = "Detected by AI analysis"


@dataclass
class IndicatorDetail:
    """Detail payload stored with a progress indicator."""
    
    message: str
    reason: str
    rule_index: Optional[int] = None
    extras: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        """Flatten detail into the stored JSON shape."""
        return {
            "rule_index": self.rule_index,
            "message": self.message,
            "reason": self.reason,
            **self.extras,
        }
    
    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "IndicatorDetail":
        """Rebuild detail from the stored JSON shape."""
        data = dict(data or {})
        return cls(
            rule_index=data.pop("rule_index", None),
            message=data.pop("message", ""),
            reason=data.pop("reason", ""),
            extras=data
        )


@dataclass
class ProgressIndicator:
    """Output artifact of one classification pass.
    
    ``id`` and ``created_at`` are assigned by the store; both stay None when
    the indicator could not be persisted.
    """
    
    session_id: str
    indicator_type: IndicatorType
    detail: IndicatorDetail
    engagement_id: Optional[str] = None
    id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    
    @property
    def is_persisted(self) -> bool:
        """Check if the store has assigned an identity."""
        return self.id is not None
    
    @classmethod
    def from_keyword_repetition(
        cls,
        session_id: str,
        keywords: List[str],
        engagement_id: Optional[str] = None
    ) -> "ProgressIndicator":
        """Create a drift indicator for repeated keywords."""
        return cls(
            session_id=session_id,
            engagement_id=engagement_id,
            indicator_type=IndicatorType.DRIFT,
            detail=IndicatorDetail(
                message=HEURISTIC_REPETITION_MESSAGE,
                reason=f"Keywords repeated across messages: {', '.join(keywords)}",
                extras={"keywords": list(keywords)}
            )
        )
    
    @classmethod
    def from_no_progress(
        cls,
        session_id: str,
        action_count: int,
        turns: int,
        engagement_id: Optional[str] = None
    ) -> "ProgressIndicator":
        """Create a stall indicator for a window without action talk."""
        return cls(
            session_id=session_id,
            engagement_id=engagement_id,
            indicator_type=IndicatorType.STALL,
            detail=IndicatorDetail(
                message=HEURISTIC_STALL_MESSAGE,
                reason=f"Only {action_count} out of {turns} recent messages mentioned actions or plans",
                extras={"turns": turns}
            )
        )
    
    @classmethod
    def from_disengagement(
        cls,
        session_id: str,
        avg_length: int,
        engagement_id: Optional[str] = None
    ) -> "ProgressIndicator":
        """Create a drift indicator for short, disengaged replies."""
        return cls(
            session_id=session_id,
            engagement_id=engagement_id,
            indicator_type=IndicatorType.DRIFT,
            detail=IndicatorDetail(
                message=HEURISTIC_DISENGAGEMENT_MESSAGE,
                reason=f"Average message length is {avg_length} characters, indicating possible disengagement",
                extras={"avgLength": avg_length}
            )
        )
    
    @classmethod
    def from_rule_match(
        cls,
        session_id: str,
        indicator_type: IndicatorType,
        rule: Optional[IndexedRule],
        reason: str,
        engagement_id: Optional[str] = None
    ) -> "ProgressIndicator":
        """Create an indicator from a rule-guided classification."""
        return cls(
            session_id=session_id,
            engagement_id=engagement_id,
            indicator_type=indicator_type,
            detail=IndicatorDetail(
                rule_index=rule.index if rule else None,
                message=rule.message if rule else FALLBACK_RULE_MESSAGE,
                reason=reason,
                extras={"pattern": rule.pattern if rule else FALLBACK_RULE_PATTERN}
            )
        )
