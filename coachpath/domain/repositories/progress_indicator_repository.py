"""Progress indicator repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List

from ..entities import ProgressIndicator


class IProgressIndicatorRepository(ABC):
    """Progress indicator repository interface.
    
    Indicators are append-only: there is no update or delete.
    """
    
    @abstractmethod
    async def create(self, indicator: ProgressIndicator) -> ProgressIndicator:
        """Insert indicator and return it with store-assigned id and timestamp."""
        pass
    
    @abstractmethod
    async def get_recent_for_session(
        self,
        session_id: str,
        limit: int = 5
    ) -> List[ProgressIndicator]:
        """Get most recent indicators for a session, newest first."""
        pass
    
    @abstractmethod
    async def get_for_engagement_since(
        self,
        engagement_id: str,
        since: datetime
    ) -> List[ProgressIndicator]:
        """Get indicators for an engagement created at or after ``since``."""
        pass
