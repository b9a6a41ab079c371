"""API presentation layer."""

import logging
from typing import AsyncGenerator, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ... import __version__
from ...domain.exceptions import CoachPathException, InvalidTrajectoryInputError
from .schemas import (
    EngagementTrajectoryResponse,
    ErrorResponse,
    IndicatorResponse,
    TrajectoryCheckRequest,
    TrajectoryCheckResponse,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Database session dependency."""
    db_manager = request.app.state.container.get("db_manager")
    async with db_manager.get_session() as session:
        yield session


def create_api_routes(app: FastAPI) -> None:
    """Create API routes."""

    register_error_handlers(app)

    @app.get("/")
    async def root():
        return {
            "message": "CoachPath Trajectory Engine",
            "version": __version__,
            "status": "running"
        }

    @app.get("/health")
    async def health_check():
        try:
            health_service = app.state.health_service
            health = await health_service.get_health_status()
            return health
        except Exception as e:
            logger.error(f"Health endpoint failed: {e}")
            return {"status": "error", "error": INTERNAL_ERROR_MESSAGE}

    @app.get("/ready")
    async def readiness_check():
        try:
            health_service = app.state.health_service
            readiness = await health_service.get_readiness_status()
            return readiness
        except Exception as e:
            logger.error(f"Readiness endpoint failed: {e}")
            return {"ready": False, "error": INTERNAL_ERROR_MESSAGE}

    @app.post(
        "/trajectory-check",
        response_model=TrajectoryCheckResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
    )
    async def trajectory_check(
        body: TrajectoryCheckRequest,
        request: Request,
        session: AsyncSession = Depends(get_db_session)
    ) -> TrajectoryCheckResponse:
        use_case = request.app.state.container.check_trajectory_use_case(session)
        result = await use_case.execute(body.to_dto())

        return TrajectoryCheckResponse(
            indicator=IndicatorResponse.from_dto(result.indicator) if result.indicator else None,
            matched=result.matched
        )

    @app.get(
        "/sessions/{session_id}/indicators",
        response_model=List[IndicatorResponse],
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
    )
    async def recent_indicators(
        session_id: str,
        request: Request,
        limit: Optional[int] = Query(None, ge=1, le=100),
        session: AsyncSession = Depends(get_db_session)
    ) -> List[IndicatorResponse]:
        use_case = request.app.state.container.recent_indicators_use_case(session)
        indicators = await use_case.execute(session_id, limit=limit)

        return [IndicatorResponse.from_dto(indicator) for indicator in indicators]

    @app.get(
        "/engagements/{engagement_id}/trajectory",
        response_model=EngagementTrajectoryResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
    )
    async def engagement_trajectory(
        engagement_id: str,
        request: Request,
        summary_status: Optional[str] = Query(None),
        session: AsyncSession = Depends(get_db_session)
    ) -> EngagementTrajectoryResponse:
        use_case = request.app.state.container.engagement_trajectory_use_case(session)
        result = await use_case.execute(engagement_id, summary_status=summary_status)

        return EngagementTrajectoryResponse(
            engagement_id=result.engagement_id,
            status=result.status,
            summary_status=result.summary_status,
            concerning_indicators=[
                IndicatorResponse.from_dto(indicator) for indicator in result.concerning_indicators
            ]
        )


def register_error_handlers(app: FastAPI) -> None:
    """Map exceptions to client/server error responses."""

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})

    @app.exception_handler(InvalidTrajectoryInputError)
    async def invalid_input_handler(request: Request, exc: InvalidTrajectoryInputError):
        return JSONResponse(status_code=400, content={"error": exc.message})

    @app.exception_handler(CoachPathException)
    async def domain_error_handler(request: Request, exc: CoachPathException):
        logger.error(f"{exc.code} on {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content={"error": INTERNAL_ERROR_MESSAGE})


def _describe_validation_error(exc: RequestValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for error in exc.errors():
        # First loc element is "body"/"query"/"path"
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    return "Invalid request: " + "; ".join(parts)
