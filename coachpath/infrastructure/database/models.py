"""SQLAlchemy database models."""

from uuid import uuid4

from sqlalchemy import Column, DateTime, Index, JSON, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from .connection import Base


class ProgressIndicatorModel(Base):
    """Progress indicator database model (append-only)."""
    
    __tablename__ = "progress_indicators"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4, index=True)
    session_id = Column(String(100), nullable=False)
    engagement_id = Column(String(100), nullable=True)
    
    # Classification result
    type = Column(String(20), nullable=False)
    detail = Column(JSON, nullable=False, default=dict)
    
    # Timestamp
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    # Indexes for recent-indicator queries
    __table_args__ = (
        Index('idx_progress_session_created', 'session_id', 'created_at'),
        Index('idx_progress_engagement_created', 'engagement_id', 'created_at'),
    )
