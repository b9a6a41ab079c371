"""Domain value objects module."""

from .session_id import SessionId
from .speaker_role import SpeakerRole
from .indicator_type import IndicatorType, TrajectoryStatus, CONCERNING_INDICATOR_TYPES
from .trajectory_rule import (
    TrajectoryRule, IndexedRule, snapshot_rules, resolve_rule_index, rules_for_prompt
)
from .classification_outcome import ClassificationOutcome, Matched, NoMatch, ServiceUnavailable
from .vocabulary import (
    HeuristicVocabulary, HeuristicThresholds, DEFAULT_VOCABULARY, DEFAULT_THRESHOLDS
)

__all__ = [
    "SessionId",
    "SpeakerRole",
    "IndicatorType",
    "TrajectoryStatus",
    "CONCERNING_INDICATOR_TYPES",
    "TrajectoryRule",
    "IndexedRule",
    "snapshot_rules",
    "resolve_rule_index",
    "rules_for_prompt",
    "ClassificationOutcome",
    "Matched",
    "NoMatch",
    "ServiceUnavailable",
    "HeuristicVocabulary",
    "HeuristicThresholds",
    "DEFAULT_VOCABULARY",
    "DEFAULT_THRESHOLDS",
]
