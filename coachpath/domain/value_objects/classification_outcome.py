"""Outcomes of the rule-guided classification tier."""

from dataclasses import dataclass
from typing import Optional, Union

from .indicator_type import IndicatorType
from .trajectory_rule import IndexedRule


@dataclass(frozen=True)
class Matched:
    """The model reported a positive indicator."""
    
    indicator_type: IndicatorType
    rule: Optional[IndexedRule]
    reason: str
    
    matched = True


@dataclass(frozen=True)
class NoMatch:
    """The model answered, but nothing actionable was found."""
    
    reason: str
    
    matched = False


@dataclass(frozen=True)
class ServiceUnavailable:
    """The classification service could not be reached or did not answer."""
    
    reason: str
    
    matched = False


ClassificationOutcome = Union[Matched, NoMatch, ServiceUnavailable]
