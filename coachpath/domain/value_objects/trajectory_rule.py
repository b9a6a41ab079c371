"""Trajectory rule value objects."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .indicator_type import IndicatorType


@dataclass(frozen=True)
class TrajectoryRule:
    """Provider-authored description of a known progress signature."""
    
    stage: str
    indicator_type: IndicatorType
    pattern: str
    message: str
    
    def to_dict(self) -> Dict[str, Any]:
        """Convert rule to a plain dictionary."""
        return {
            "stage": self.stage,
            "indicator_type": self.indicator_type.value,
            "pattern": self.pattern,
            "message": self.message,
        }


@dataclass(frozen=True)
class IndexedRule:
    """A rule snapshot together with its position in the set it came from."""
    
    index: int
    rule: TrajectoryRule
    
    @property
    def message(self) -> str:
        return self.rule.message
    
    @property
    def pattern(self) -> str:
        return self.rule.pattern
    
    def to_prompt_dict(self) -> Dict[str, Any]:
        """Rule as enumerated for the classification prompt."""
        return {"index": self.index, **self.rule.to_dict()}


def snapshot_rules(rules: Sequence[TrajectoryRule]) -> Tuple[IndexedRule, ...]:
    """Freeze a rule list into indexed snapshots."""
    return tuple(IndexedRule(index=idx, rule=rule) for idx, rule in enumerate(rules))


def resolve_rule_index(rules: Sequence[IndexedRule], raw_index: Any) -> Optional[IndexedRule]:
    """Return the snapshot for a model-reported index if it is in range.

    Integers and integer strings ("2") are accepted; anything else is None.
    """
    if isinstance(raw_index, str):
        try:
            raw_index = int(raw_index.strip())
        except ValueError:
            return None

    if isinstance(raw_index, bool) or not isinstance(raw_index, int):
        return None

    if 0 <= raw_index < len(rules):
        return rules[raw_index]
    
    return None


def rules_for_prompt(rules: Sequence[IndexedRule]) -> List[Dict[str, Any]]:
    """Enumerate rules for the classification prompt."""
    return [rule.to_prompt_dict() for rule in rules]
