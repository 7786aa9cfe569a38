"""FastAPI app: analytics, outreach profile, search, sign-in, GDPR and health.

Pipelines raise domain exceptions; the handlers below turn them into
``ErrorResponse`` bodies with the right status code.
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import Any

import pendulum
from fastapi import Body, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from redis import asyncio as aioredis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import models
from .auth import Principal, require_recruiter, require_user
from .cache import close_redis, get_redis
from .config import settings
from .db import get_session
from .logging_config import setup_logging
from .pipelines import analytics
from .pipelines.analytics import AnalyticsError
from .pipelines.gdpr import GdprError, delete_user_data, export_user_data
from .pipelines.ingest import CandidateIngestError, CandidateValidationError, ingest_candidate
from .pipelines.outreach import (
    OutreachHistoryError,
    OutreachProfileError,
    load_outreach_history,
    load_outreach_profile,
)
from .pipelines.search import SearchError, SearchTimeoutError, search_candidates
from .ratelimit import (
    RateLimitExceeded,
    gdpr_delete_limiter,
    gdpr_export_limiter,
    search_limiter,
    signin_limiter,
)
from .schemas import (
    AverageResponse,
    CountResponse,
    DeletionResponse,
    EducationCount,
    EmailStatsResponse,
    ErrorResponse,
    ExperienceBin,
    HealthCheck,
    HealthResponse,
    IngestCandidateResponse,
    OutreachHistoryResponse,
    OutreachProfileResponse,
    RateLimitErrorResponse,
    SearchRequest,
    SearchResponse,
    SigninResponse,
    SkillCount,
    UserDataExportResponse,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info(f"{settings.app_name} v{settings.version} starting up ({settings.environment.value})")

    yield

    # Shutdown
    await close_redis()
    logger.info("Application shutting down")


app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description="Recruiting analytics, candidate search and outreach profiles",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, error: str, detail: Any = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail).model_dump(),
    )


# Exception handlers
@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Flatten request validation errors into ``{field: [messages]}``."""
    field_errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field_errors.setdefault(".".join(loc) or "__root__", []).append(err.get("msg", "Invalid value"))
    logger.warning(f"Validation failed for {request.method} {request.url.path}: {field_errors}")
    return _error(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed. Please check your input.",
        field_errors,
    )


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=RateLimitErrorResponse(error=str(exc), retryAfter=exc.retry_after).model_dump(),
        headers={"Retry-After": str(exc.retry_after)},
    )


@app.exception_handler(AnalyticsError)
async def analytics_error_handler(request: Request, exc: AnalyticsError):
    """Handle analytics query failures."""
    logger.error(f"Analytics error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message)


@app.exception_handler(OutreachProfileError)
async def outreach_error_handler(request: Request, exc: OutreachProfileError):
    logger.error(f"Outreach profile error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch outreach profile.", str(exc))


@app.exception_handler(OutreachHistoryError)
async def outreach_history_error_handler(request: Request, exc: OutreachHistoryError):
    logger.error(f"Outreach history error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to fetch outreach history.", str(exc))


@app.exception_handler(SearchTimeoutError)
async def search_timeout_handler(request: Request, exc: SearchTimeoutError):
    return _error(status.HTTP_504_GATEWAY_TIMEOUT, str(exc))


@app.exception_handler(SearchError)
async def search_error_handler(request: Request, exc: SearchError):
    """Handle search pipeline errors."""
    logger.error(f"Search error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))


@app.exception_handler(CandidateValidationError)
async def candidate_validation_handler(request: Request, exc: CandidateValidationError):
    return _error(
        status.HTTP_400_BAD_REQUEST,
        "Validation failed. Please check your input.",
        exc.field_errors,
    )


@app.exception_handler(CandidateIngestError)
async def candidate_ingest_handler(request: Request, exc: CandidateIngestError):
    logger.error(f"Candidate ingest error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to store candidate.", str(exc))


@app.exception_handler(GdprError)
async def gdpr_error_handler(request: Request, exc: GdprError):
    logger.error(f"GDPR error: {exc}")
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, exc.detail)


# Health
async def _check_database(session: AsyncSession) -> HealthCheck:
    start = time.perf_counter()
    try:
        await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Health check: database unavailable: {e}")
        return HealthCheck(status="error", detail=str(e))
    return HealthCheck(status="ok", latency_ms=round((time.perf_counter() - start) * 1000, 2))


async def _check_redis(client: aioredis.Redis) -> HealthCheck:
    start = time.perf_counter()
    try:
        await client.ping()
    except (RedisError, OSError) as e:
        logger.error(f"Health check: Redis unavailable: {e}")
        return HealthCheck(status="error", detail=str(e))
    return HealthCheck(status="ok", latency_ms=round((time.perf_counter() - start) * 1000, 2))


@app.get("/health", response_model=HealthResponse, response_model_exclude_none=True)
async def health(
    quick: str | None = Query(default=None, description="true or 1 skips dependency checks"),
    session: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> HealthResponse:
    """Health check endpoint."""
    response = HealthResponse(
        status="ok",
        version=settings.version,
        timestamp=pendulum.now("UTC").to_iso8601_string(),
    )
    if quick is not None and quick.lower() in ("true", "1"):
        return response

    checks = {"database": await _check_database(session)}
    if redis is not None:
        checks["redis"] = await _check_redis(redis)

    response.checks = checks
    if any(c.status != "ok" for c in checks.values()):
        response.status = "degraded"
    return response


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "app": settings.app_name,
        "version": settings.version,
        "endpoints": {
            "health": "/health",
            "skills": "/analytics/skills",
            "education": "/analytics/education",
            "experience": "/analytics/experience",
            "total_candidates": "/analytics/kpi/total-candidates",
            "new_candidates": "/analytics/kpi/new-candidates-30d",
            "avg_skills": "/analytics/kpi/avg-skills",
            "email_stats": "/analytics/outreach/email-stats",
            "outreach_profile": "/candidate/{candidate_id}/outreach-profile",
            "outreach_history": "/outreach-history",
            "search": "/search",
            "signin": "/auth/initiate-signin",
            "gdpr_export": "/gdpr/export",
            "gdpr_delete": "/gdpr/delete",
            "docs": "/docs",
        },
    }


# Analytics
@app.get("/analytics/skills", response_model=list[SkillCount])
async def skills_distribution(
    limit: int | None = Query(default=None, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
) -> list[dict]:
    return await analytics.load_skills_distribution(session, limit=limit)


@app.get("/analytics/education", response_model=list[EducationCount])
async def education_breakdown(session: AsyncSession = Depends(get_session)) -> list[dict]:
    return await analytics.load_education_breakdown(session)


@app.get("/analytics/experience", response_model=list[ExperienceBin])
async def experience_distribution(session: AsyncSession = Depends(get_session)) -> list[dict]:
    return await analytics.load_experience_distribution(session)


@app.get("/analytics/kpi/total-candidates", response_model=CountResponse)
async def total_candidates(
    principal: Principal = Depends(require_recruiter),
    session: AsyncSession = Depends(get_session),
) -> CountResponse:
    return CountResponse(count=await analytics.count_candidates(session))


@app.get("/analytics/kpi/new-candidates-30d", response_model=CountResponse)
async def new_candidates(session: AsyncSession = Depends(get_session)) -> CountResponse:
    return CountResponse(count=await analytics.count_new_candidates(session, days=30))


@app.get("/analytics/kpi/avg-skills", response_model=AverageResponse)
async def average_skills(session: AsyncSession = Depends(get_session)) -> AverageResponse:
    return AverageResponse(average=await analytics.load_average_skills(session))


@app.get("/analytics/outreach/email-stats", response_model=EmailStatsResponse)
async def email_stats(
    period: str | None = Query(default=None, description="Look-back period such as 7d or 30d"),
    session: AsyncSession = Depends(get_session),
) -> EmailStatsResponse:
    stats = await analytics.load_email_stats(session, period=period)
    return EmailStatsResponse(
        sent=stats.sent,
        delivered=stats.delivered,
        opened=stats.opened,
        clicked=stats.clicked,
        periodDays=stats.period_days,
    )


# Candidates
@app.get("/candidate/{candidate_id}/outreach-profile", response_model=OutreachProfileResponse)
async def outreach_profile(
    candidate_id: str,
    principal: Principal = Depends(require_recruiter),
    session: AsyncSession = Depends(get_session),
) -> OutreachProfileResponse:
    """Condensed candidate view used to compose outreach messages."""
    if not models.is_cuid(candidate_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid Candidate ID format.",
        )

    profile = await load_outreach_profile(session, candidate_id)
    if profile is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Candidate not found.",
        )

    return OutreachProfileResponse(
        id=profile.id,
        name=profile.name,
        email=profile.email,
        phone=profile.phone,
        headline=profile.headline,
        key_skills=profile.key_skills,
        experience_summary=profile.experience_summary,
        education_summary=profile.education_summary,
    )


@app.get("/outreach-history", response_model=OutreachHistoryResponse)
async def outreach_history(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100, alias="pageSize"),
    principal: Principal = Depends(require_recruiter),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Paginated email outreach history, most recently sent first."""
    return await load_outreach_history(session, page=page, page_size=page_size)


@app.post(
    "/candidates",
    response_model=IngestCandidateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_candidate(
    payload: dict[str, Any] = Body(...),
    principal: Principal = Depends(require_recruiter),
    session: AsyncSession = Depends(get_session),
) -> IngestCandidateResponse:
    """Ingest a candidate delivered by an internal system."""
    processed = await ingest_candidate(session, payload)
    return IngestCandidateResponse(**processed)


@app.post(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(search_limiter)],
)
async def search(
    request: SearchRequest,
    response: Response,
    principal: Principal = Depends(require_recruiter),
    session: AsyncSession = Depends(get_session),
    redis: aioredis.Redis | None = Depends(get_redis),
) -> dict:
    """Rank candidates for a free-text query.

    Scores combine skill match, experience relevance and cultural fit using
    the request's weights (default 0.4/0.3/0.3). Contact PII is redacted.
    """
    outcome = await search_candidates(
        session,
        redis,
        request.query,
        weights=request.weights.model_dump() if request.weights else None,
        user_id=principal.user_id,
    )
    response.headers["X-Cache-Status"] = "HIT" if outcome.cache_hit else "MISS"
    return outcome.body


# Auth
@app.api_route(
    "/auth/initiate-signin",
    methods=["GET", "POST"],
    response_model=SigninResponse,
    dependencies=[Depends(signin_limiter)],
)
async def initiate_signin() -> SigninResponse:
    """Rate-limited gate in front of the provider's sign-in flow."""
    return SigninResponse(
        message="Sign-in process can be initiated. Please proceed to the actual sign-in page/method.",
        note="This is a rate-limited endpoint in front of the main sign-in flow.",
        signInPage="/api/auth/signin",
    )


# GDPR
@app.get(
    "/gdpr/export",
    response_model=UserDataExportResponse,
    dependencies=[Depends(gdpr_export_limiter)],
)
async def gdpr_export(
    response: Response,
    principal: Principal = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Download everything stored about the signed-in user."""
    data = await export_user_data(session, principal.user_id)
    if data is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    response.headers["Content-Disposition"] = (
        f'attachment; filename="user_data_export_{principal.user_id}.json"'
    )
    return data


@app.post(
    "/gdpr/delete",
    response_model=DeletionResponse,
    dependencies=[Depends(gdpr_delete_limiter)],
)
async def gdpr_delete(
    principal: Principal = Depends(require_user),
    session: AsyncSession = Depends(get_session),
) -> dict:
    """Delete the signed-in user's account; audit entries are kept anonymized."""
    result = await delete_user_data(session, principal.user_id)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found or already deleted.",
        )
    return result
