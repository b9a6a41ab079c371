"""Engagement trajectory status derivation."""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence

from ..entities import ProgressIndicator
from ..value_objects import TrajectoryStatus, CONCERNING_INDICATOR_TYPES


class TrajectoryStatusService:
    """Domain service combining summary status with recent indicators."""
    
    def __init__(self, lookback_days: int = 7):
        self.lookback_days = lookback_days
    
    def window_start(self, now: Optional[datetime] = None) -> datetime:
        """Earliest creation time an indicator may have to count as recent."""
        now = now or datetime.now(timezone.utc)
        return _as_utc(now) - timedelta(days=self.lookback_days)
    
    def concerning_indicators(
        self,
        indicators: Sequence[ProgressIndicator],
        now: Optional[datetime] = None
    ) -> List[ProgressIndicator]:
        """Filter indicators to concerning ones inside the lookback window."""
        since = self.window_start(now)
        
        return [
            indicator for indicator in indicators
            if indicator.indicator_type in CONCERNING_INDICATOR_TYPES
            and indicator.created_at is not None
            and _as_utc(indicator.created_at) >= since
        ]
    
    def derive_status(
        self,
        summary_status: Optional[TrajectoryStatus],
        indicators: Sequence[ProgressIndicator],
        now: Optional[datetime] = None
    ) -> TrajectoryStatus:
        """Downgrade a steady status to drifting when recent indicators concern us.
        
        Statuses other than steady come from the session summary and are kept
        as they are.
        """
        status = summary_status or TrajectoryStatus.STEADY
        
        if status == TrajectoryStatus.STEADY and self.concerning_indicators(indicators, now):
            return TrajectoryStatus.DRIFTING
        
        return status


def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value
