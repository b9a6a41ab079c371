"""Classification service interface."""

from abc import ABC, abstractmethod
from typing import Sequence

from ...domain.entities import Message
from ...domain.value_objects import ClassificationOutcome, IndexedRule


class IClassificationService(ABC):
    """Interface for rule-guided trajectory classification.
    
    Implementations never raise for service-side problems; they return
    ``ServiceUnavailable`` or ``NoMatch`` instead.
    """
    
    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Whether the service is configured to accept requests."""
        pass
    
    @abstractmethod
    async def classify(
        self,
        messages: Sequence[Message],
        rules: Sequence[IndexedRule]
    ) -> ClassificationOutcome:
        """Classify the seeker's recent direction against the rules."""
        pass
    
    @abstractmethod
    async def close(self) -> None:
        """Release underlying resources."""
        pass
