"""SQL progress indicator repository implementation."""

from datetime import datetime
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...domain.entities import IndicatorDetail, ProgressIndicator
from ...domain.exceptions import IndicatorPersistenceError
from ...domain.repositories import IProgressIndicatorRepository
from ...domain.value_objects import IndicatorType
from ..database.models import ProgressIndicatorModel


class SQLProgressIndicatorRepository(IProgressIndicatorRepository):
    """SQL implementation of progress indicator repository."""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def create(self, indicator: ProgressIndicator) -> ProgressIndicator:
        """Insert indicator; the store assigns id and creation time."""
        
        model = ProgressIndicatorModel(
            session_id=indicator.session_id,
            engagement_id=indicator.engagement_id,
            type=indicator.indicator_type.value,
            detail=indicator.detail.to_dict()
        )
        
        try:
            self.session.add(model)
            await self.session.commit()
            await self.session.refresh(model)
        except (SQLAlchemyError, OSError) as e:
            await self.session.rollback()
            raise IndicatorPersistenceError("indicator insert", str(e)) from e
        
        return self._to_entity(model)
    
    async def get_recent_for_session(
        self,
        session_id: str,
        limit: int = 5
    ) -> List[ProgressIndicator]:
        """Get most recent indicators for a session, newest first."""
        
        stmt = (
            select(ProgressIndicatorModel)
            .where(ProgressIndicatorModel.session_id == session_id)
            .order_by(ProgressIndicatorModel.created_at.desc())
            .limit(limit)
        )
        
        return await self._fetch(stmt, "recent indicator query")
    
    async def get_for_engagement_since(
        self,
        engagement_id: str,
        since: datetime
    ) -> List[ProgressIndicator]:
        """Get indicators for an engagement created at or after ``since``."""
        
        stmt = (
            select(ProgressIndicatorModel)
            .where(
                ProgressIndicatorModel.engagement_id == engagement_id,
                ProgressIndicatorModel.created_at >= since
            )
            .order_by(ProgressIndicatorModel.created_at.desc())
        )
        
        return await self._fetch(stmt, "engagement indicator query")
    
    async def _fetch(self, stmt, operation: str) -> List[ProgressIndicator]:
        """Execute a select and convert rows to entities."""
        try:
            result = await self.session.execute(stmt)
            models = result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            raise IndicatorPersistenceError(operation, str(e)) from e
        
        return [self._to_entity(model) for model in models]
    
    def _to_entity(self, model: ProgressIndicatorModel) -> ProgressIndicator:
        """Convert database model to domain entity."""
        
        return ProgressIndicator(
            id=model.id,
            session_id=model.session_id,
            engagement_id=model.engagement_id,
            indicator_type=IndicatorType(model.type),
            detail=IndicatorDetail.from_dict(model.detail),
            created_at=model.created_at
        )
