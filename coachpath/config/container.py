"""Dependency injection container."""

import logging
from functools import lru_cache
from typing import Any, Dict, Optional

from ..application.interfaces import IClassificationService
from ..application.use_cases import (
    CheckTrajectoryUseCase, GetRecentIndicatorsUseCase, GetEngagementTrajectoryUseCase
)
from ..domain.repositories import IProgressIndicatorRepository
from ..domain.services import HeuristicAnalysisService, TrajectoryStatusService
from ..infrastructure.database import DatabaseManager
from ..infrastructure.external_services import GatewayClassificationService
from ..infrastructure.repositories import SQLProgressIndicatorRepository
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.
    
    Holds process-wide stateless services. Repositories and use cases are
    built per request around a database session.
    """
    
    def __init__(self, settings: Settings):
        self.settings = settings
        self._instances: Dict[str, Any] = {}
        self._initialized = False
    
    async def initialize(self) -> None:
        """Initialize container and all dependencies."""
        if self._initialized:
            return
        
        try:
            # Initialize database; a registered manager is initialized the same way
            db_manager = self._instances.get("db_manager") or DatabaseManager(
                self.settings.database_url,
                echo=self.settings.debug
            )
            await db_manager.initialize()
            await db_manager.create_tables()
            self._instances["db_manager"] = db_manager
            
            # Register services
            self._register_domain_services()
            self._register_infrastructure_services()
            
            self._initialized = True
            logger.info("Dependency injection container initialized")
            
        except Exception as e:
            logger.error(f"Failed to initialize container: {e}")
            raise
    
    def _register_domain_services(self) -> None:
        """Register domain services."""
        self._instances.setdefault("heuristic_service", HeuristicAnalysisService())
        self._instances.setdefault("status_service", TrajectoryStatusService(
            lookback_days=self.settings.status_lookback_days
        ))
    
    def _register_infrastructure_services(self) -> None:
        """Register infrastructure services."""
        if "classification_service" in self._instances:
            return
        
        self._instances["classification_service"] = GatewayClassificationService(
            api_key=self.settings.llm_api_key,
            base_url=self.settings.llm_base_url,
            model=self.settings.llm_model,
            temperature=self.settings.llm_temperature,
            timeout=self.settings.llm_timeout_seconds
        )
        
        if not self._instances["classification_service"].is_available:
            logger.warning("LLM_API_KEY not set, rule-guided classification disabled")
    
    def register(self, service_name: str, instance: Any) -> None:
        """Register or replace a service instance.
        
        Overrides registered before ``initialize()`` are kept and the rest of
        the wiring is still built there; registering never marks the
        container as initialized.
        """
        self._instances[service_name] = instance
    
    @property
    def is_initialized(self) -> bool:
        return self._initialized
    
    def get(self, service_name: str) -> Any:
        """Get service instance (registered overrides resolve before initialization)."""
        instance = self._instances.get(service_name)
        if instance is None:
            if not self._initialized:
                raise RuntimeError(f"Container not initialized, '{service_name}' unavailable")
            raise ValueError(f"Service '{service_name}' not found")
        
        return instance
    
    def indicator_repository(self, session) -> IProgressIndicatorRepository:
        """Build a repository bound to a database session."""
        factory = self._instances.get("indicator_repository_factory", SQLProgressIndicatorRepository)
        return factory(session)
    
    def check_trajectory_use_case(self, session) -> CheckTrajectoryUseCase:
        """Build the classification use case for one request."""
        return CheckTrajectoryUseCase(
            indicator_repository=self.indicator_repository(session),
            classification_service=self.get("classification_service"),
            heuristic_service=self.get("heuristic_service")
        )
    
    def recent_indicators_use_case(self, session) -> GetRecentIndicatorsUseCase:
        """Build the recent-indicators use case for one request."""
        return GetRecentIndicatorsUseCase(
            indicator_repository=self.indicator_repository(session),
            default_limit=self.settings.recent_indicator_limit
        )
    
    def engagement_trajectory_use_case(self, session) -> GetEngagementTrajectoryUseCase:
        """Build the engagement-status use case for one request."""
        return GetEngagementTrajectoryUseCase(
            indicator_repository=self.indicator_repository(session),
            status_service=self.get("status_service")
        )
    
    async def health_check(self) -> Dict[str, bool]:
        """Check health of all services."""
        health_status = {}
        
        # Database health
        try:
            db_manager = self.get("db_manager")
            health_status["database"] = await db_manager.health_check()
        except Exception:
            health_status["database"] = False
        
        return health_status
    
    async def close(self) -> None:
        """Close container and cleanup resources."""
        classification_service: Optional[IClassificationService] = self._instances.get(
            "classification_service"
        )
        try:
            if classification_service:
                await classification_service.close()
            
            db_manager = self._instances.get("db_manager")
            if db_manager:
                await db_manager.close()
            
            logger.info("Container closed successfully")
        except Exception as e:
            logger.error(f"Error closing container: {e}")


# Global container instance
_container: Optional[Container] = None


@lru_cache()
def get_container() -> Container:
    """Get cached container instance."""
    global _container
    if not _container:
        settings = get_settings()
        _container = Container(settings)
    return _container
