"""Domain services module."""

from .heuristic_analysis_service import HeuristicAnalysisService
from .trajectory_status_service import TrajectoryStatusService

__all__ = [
    "HeuristicAnalysisService",
    "TrajectoryStatusService",
]
