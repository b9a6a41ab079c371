"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from . import __version__
from .config import Container, Settings, get_container, get_settings
from .monitoring import HealthCheckService, setup_logging
from .presentation.api import create_api_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    
    # Startup
    settings: Settings = app.state.settings
    setup_logging(settings)
    
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")
    
    try:
        container = app.state.container
        await container.initialize()
        
        health_service = HealthCheckService(container)
        app.state.health_service = health_service
        
        # Run initial health check
        health = await health_service.get_health_status()
        logger.info(f"System health: {health['status']}")
        
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise
    
    yield
    
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    
    try:
        await app.state.container.close()
        logger.info("Shutdown completed")
    except Exception as e:
        logger.error(f"Shutdown error: {e}")


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[Container] = None
) -> FastAPI:
    """Create FastAPI application."""
    
    if container is None:
        container = Container(settings) if settings else get_container()
    settings = settings or get_settings()
    
    app = FastAPI(
        title="CoachPath Trajectory Engine API",
        description="Two-tier trajectory classification for coaching sessions",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.container = container
    
    # Add API routes
    create_api_routes(app)
    
    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    settings = get_settings()
    
    uvicorn.run(
        "coachpath.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
