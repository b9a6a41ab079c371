"""Trajectory-related use cases."""

from datetime import datetime
from typing import List, Optional

import structlog

from ...domain.entities import Message, ProgressIndicator
from ...domain.exceptions import IndicatorPersistenceError, InvalidTrajectoryInputError
from ...domain.repositories import IProgressIndicatorRepository
from ...domain.services import HeuristicAnalysisService, TrajectoryStatusService
from ...domain.value_objects import (
    IndicatorType,
    Matched,
    SessionId,
    SpeakerRole,
    TrajectoryRule,
    TrajectoryStatus,
    snapshot_rules,
)
from ..dto import (
    CheckTrajectoryDTO,
    EngagementTrajectoryDTO,
    MessageDTO,
    ProgressIndicatorDTO,
    TrajectoryCheckResultDTO,
    TrajectoryRuleDTO,
)
from ..interfaces import IClassificationService

logger = structlog.get_logger(__name__)


class CheckTrajectoryUseCase:
    """Use case for classifying a session's recent trajectory.

    The heuristic tier always runs first and a finding there ends the pass.
    The rule-guided tier only runs when the heuristics found nothing, the
    classification service is configured and the provider has rules.
    At most one indicator is produced and persisted per call.
    """

    def __init__(
        self,
        indicator_repository: IProgressIndicatorRepository,
        classification_service: IClassificationService,
        heuristic_service: HeuristicAnalysisService
    ):
        self.indicator_repository = indicator_repository
        self.classification_service = classification_service
        self.heuristic_service = heuristic_service

    async def execute(self, dto: CheckTrajectoryDTO) -> TrajectoryCheckResultDTO:
        """Run the classification pass and persist a positive result."""

        session_id = self._validate(dto)
        messages = [self._to_message(msg) for msg in dto.recent_messages]
        rules = snapshot_rules([self._to_rule(rule) for rule in dto.trajectory_rules])

        log = logger.bind(session_id=session_id, message_count=len(messages), rule_count=len(rules))

        # Tier 1: heuristics
        finding = self.heuristic_service.analyze(
            session_id, messages, engagement_id=dto.engagement_id
        )
        if finding:
            log.info("heuristic_indicator_detected", indicator_type=finding.indicator_type.value)
            indicator = await self._persist(finding)
            return TrajectoryCheckResultDTO(indicator=to_indicator_dto(indicator), matched=True)

        # Tier 2: rule-guided classification
        if not self.classification_service.is_available or not rules:
            log.debug(
                "rule_classification_skipped",
                service_available=self.classification_service.is_available
            )
            return TrajectoryCheckResultDTO(indicator=None, matched=False)

        outcome = await self.classification_service.classify(messages, rules)

        if not isinstance(outcome, Matched):
            log.info(
                "no_trajectory_indicator",
                outcome=type(outcome).__name__,
                reason=outcome.reason
            )
            return TrajectoryCheckResultDTO(indicator=None, matched=False, classification=outcome)

        finding = ProgressIndicator.from_rule_match(
            session_id,
            outcome.indicator_type,
            outcome.rule,
            outcome.reason,
            engagement_id=dto.engagement_id
        )
        log.info(
            "rule_indicator_detected",
            indicator_type=outcome.indicator_type.value,
            rule_index=outcome.rule.index if outcome.rule else None
        )
        indicator = await self._persist(finding)

        return TrajectoryCheckResultDTO(
            indicator=to_indicator_dto(indicator),
            matched=True,
            classification=outcome
        )

    async def _persist(self, indicator: ProgressIndicator) -> ProgressIndicator:
        """Store indicator; on failure return it unpersisted."""
        try:
            return await self.indicator_repository.create(indicator)
        except IndicatorPersistenceError as e:
            logger.error(
                "indicator_insert_failed",
                session_id=indicator.session_id,
                indicator_type=indicator.indicator_type.value,
                error=e.message
            )
            return indicator

    def _validate(self, dto: CheckTrajectoryDTO) -> str:
        """Check required arguments and return the session ID."""
        try:
            session_id = SessionId.from_raw(dto.session_id)
        except ValueError as e:
            raise InvalidTrajectoryInputError("sessionId", str(e))

        if dto.recent_messages is None:
            raise InvalidTrajectoryInputError("recentMessages", "recentMessages must be an array")

        if dto.trajectory_rules is None:
            raise InvalidTrajectoryInputError("trajectoryRules", "trajectoryRules must be an array")

        return session_id.value

    def _to_message(self, dto: MessageDTO) -> Message:
        """Convert message DTO to entity."""
        try:
            role = SpeakerRole(dto.role)
        except ValueError:
            raise InvalidTrajectoryInputError("recentMessages", f"unknown role '{dto.role}'")

        return Message(role=role, content=dto.content or "", created_at=dto.created_at)

    def _to_rule(self, dto: TrajectoryRuleDTO) -> TrajectoryRule:
        """Convert rule DTO to value object."""
        indicator_type = IndicatorType.parse(dto.indicator_type)
        if indicator_type is None:
            raise InvalidTrajectoryInputError(
                "trajectoryRules", f"unknown indicator_type '{dto.indicator_type}'"
            )

        return TrajectoryRule(
            stage=dto.stage,
            indicator_type=indicator_type,
            pattern=dto.pattern,
            message=dto.message
        )


class GetRecentIndicatorsUseCase:
    """Use case for listing a session's latest indicators."""

    def __init__(self, indicator_repository: IProgressIndicatorRepository, default_limit: int = 5):
        self.indicator_repository = indicator_repository
        self.default_limit = default_limit

    async def execute(self, session_id: str, limit: Optional[int] = None) -> List[ProgressIndicatorDTO]:
        """Get recent indicators, newest first."""

        try:
            session = SessionId.from_raw(session_id)
        except ValueError as e:
            raise InvalidTrajectoryInputError("sessionId", str(e))

        limit = self.default_limit if limit is None else limit
        if limit < 1:
            raise InvalidTrajectoryInputError("limit", "must be a positive integer")

        indicators = await self.indicator_repository.get_recent_for_session(session.value, limit=limit)

        return [to_indicator_dto(indicator) for indicator in indicators]


class GetEngagementTrajectoryUseCase:
    """Use case for deriving the trajectory status shown for an engagement."""

    def __init__(
        self,
        indicator_repository: IProgressIndicatorRepository,
        status_service: TrajectoryStatusService
    ):
        self.indicator_repository = indicator_repository
        self.status_service = status_service

    async def execute(
        self,
        engagement_id: str,
        summary_status: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> EngagementTrajectoryDTO:
        """Combine the latest summary status with recent indicators."""

        if not engagement_id or not str(engagement_id).strip():
            raise InvalidTrajectoryInputError("engagementId", "engagementId is required")

        try:
            status = TrajectoryStatus(summary_status) if summary_status else TrajectoryStatus.STEADY
        except ValueError:
            raise InvalidTrajectoryInputError("summary_status", f"unknown status '{summary_status}'")

        indicators = await self.indicator_repository.get_for_engagement_since(
            engagement_id, self.status_service.window_start(now)
        )
        concerning = self.status_service.concerning_indicators(indicators, now)
        derived = self.status_service.derive_status(status, indicators, now)

        logger.debug(
            "engagement_status_derived",
            engagement_id=engagement_id,
            summary_status=status.value,
            status=derived.value,
            concerning_count=len(concerning)
        )

        return EngagementTrajectoryDTO(
            engagement_id=engagement_id,
            status=derived.value,
            summary_status=status.value,
            concerning_indicators=[to_indicator_dto(indicator) for indicator in concerning]
        )


def to_indicator_dto(indicator: ProgressIndicator) -> ProgressIndicatorDTO:
    """Convert indicator entity to DTO."""
    return ProgressIndicatorDTO(
        id=indicator.id,
        session_id=indicator.session_id,
        engagement_id=indicator.engagement_id,
        type=indicator.indicator_type.value,
        detail=indicator.detail.to_dict(),
        created_at=indicator.created_at
    )
