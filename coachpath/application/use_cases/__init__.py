"""Application use cases module."""

from .trajectory_use_cases import (
    CheckTrajectoryUseCase,
    GetRecentIndicatorsUseCase,
    GetEngagementTrajectoryUseCase,
    to_indicator_dto,
)

__all__ = [
    "CheckTrajectoryUseCase",
    "GetRecentIndicatorsUseCase",
    "GetEngagementTrajectoryUseCase",
    "to_indicator_dto",
]
