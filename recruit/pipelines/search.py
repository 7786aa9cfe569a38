"""Candidate search: parse the query, score the pool, rank, redact, cache.

Results are cached per (lowercased query, weights) and contain no contact
PII. The scoring itself lives in ``scoring.match``.
"""
from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from dataclasses import dataclass
from typing import Any

from redis import asyncio as aioredis
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recruit import models
from recruit.audit import create_audit_log
from recruit.cache import get_cache, set_cache
from recruit.encryption import decrypt_candidate
from recruit.config import settings
from recruit.redaction import redact_candidate_pii
from scoring.match import CandidateScore, Weights, rank_candidates
from scoring.query import parse_query

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = "No candidates found matching your query."


class SearchError(Exception):
    """Raised when the search pipeline fails."""
    pass


class SearchTimeoutError(SearchError):
    """Raised when the search does not finish within the configured timeout."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Search operation timed out after {timeout_seconds:g}s. Please try again later."
        )


@dataclass
class SearchOutcome:
    """Response body plus whether it came from the cache."""
    body: dict[str, Any]
    cache_hit: bool


def default_weights() -> Weights:
    return Weights(
        w_skill=settings.search.w_skill,
        w_experience=settings.search.w_experience,
        w_culture=settings.search.w_culture,
    )


def search_cache_key(query: str, weights: dict[str, float] | None) -> str:
    payload = query.lower() + json.dumps(weights or {}, separators=(",", ":"))
    digest = hashlib.md5(payload.encode("utf-8")).hexdigest()
    return f"{settings.search.cache_key_prefix}:{digest}"


def candidate_result(candidate: models.Candidate, score: CandidateScore) -> dict[str, Any]:
    """Public search result for one candidate, before redaction."""
    skills = candidate.skills if isinstance(candidate.skills, list) else []
    return {
        "id": candidate.id,
        "name": candidate.name or "N/A",
        "title": candidate.title or "N/A",
        "location": candidate.location,
        "email": candidate.email,
        "phone": candidate.phone,
        "address": candidate.address,
        "skills": skills,
        "workExperience": candidate.work_experience,
        "education": candidate.education,
        "certifications": candidate.certifications,
        "match_score": score.match_score,
        "skill_match": score.skill_match,
        "experience_relevance": score.experience_relevance,
        "cultural_fit": score.cultural_fit,
        "score_breakdown": score.breakdown,
        "percentile_rank": score.percentile_rank,
        "reasoning": score.reasoning,
        "source_url": candidate.source_url or "#",
    }


async def load_candidate_pool(session: AsyncSession, limit: int) -> list[models.Candidate]:
    result = await session.execute(
        select(models.Candidate)
        .order_by(models.Candidate.created_at.desc())
        .limit(limit)
    )
    pool = list(result.scalars().all())
    # Detached: decrypted values must never flush back to the table
    for candidate in pool:
        session.expunge(candidate)
        decrypt_candidate(candidate)
    return pool


async def _run_search(
    session: AsyncSession,
    query: str,
    weights: Weights,
) -> dict[str, Any]:
    parsed = parse_query(query)

    pool = await load_candidate_pool(session, settings.search.pool_size)
    if not pool:
        return {"candidates": [], "parsedQuery": parsed.to_dict(), "message": NO_RESULTS_MESSAGE}

    ranked = await asyncio.to_thread(rank_candidates, pool, parsed, weights, top_n=settings.search.top_n)
    candidates = [redact_candidate_pii(candidate_result(c, score)) for c, score in ranked]

    logger.info(f"Search {query!r}: scored {len(pool)} candidates, returning {len(candidates)}")
    return {"candidates": candidates, "parsedQuery": parsed.to_dict()}


async def search_candidates(
    session: AsyncSession,
    redis: aioredis.Redis | None,
    query: str,
    *,
    weights: dict[str, float] | None = None,
    user_id: str | None = None,
) -> SearchOutcome:
    """Search the candidate pool for ``query``.

    Args:
        session: Database session
        redis: Cache client, or None to bypass caching
        query: Free-text recruiter query
        weights: Optional ``{w_skill, w_experience, w_culture}``; validated by the caller
        user_id: Audit principal

    Raises:
        SearchTimeoutError: When loading and scoring exceed ``SEARCH_TIMEOUT_SECONDS``.
            Scoring runs in a worker thread; on timeout the response returns
            at once and the abandoned scoring pass finishes in the background.
        SearchError: For database failures
    """
    effective = Weights(**weights) if weights else default_weights()
    cache_key = search_cache_key(query, weights)

    cached = await get_cache(redis, cache_key)
    if cached is not None:
        logger.info(f"Cache hit for query {query!r} (key: {cache_key})")
        body, cache_hit = cached, True
    else:
        logger.info(f"Cache miss for query {query!r} (key: {cache_key})")
        timeout = settings.search.timeout_seconds
        try:
            body = await asyncio.wait_for(_run_search(session, query, effective), timeout=timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Search timed out after {timeout}s for query {query!r}")
            raise SearchTimeoutError(timeout) from e
        except SQLAlchemyError as e:
            logger.error(f"Search failed for query {query!r}: {e}", exc_info=True)
            raise SearchError(
                "An unexpected error occurred processing your search. Please try again later."
            ) from e
        await set_cache(redis, cache_key, body, expiration_seconds=settings.search.cache_ttl_seconds)
        cache_hit = False

    if user_id:
        await create_audit_log(
            session,
            "CANDIDATE_SEARCH",
            user_id=user_id,
            details={
                "query": query,
                "filtersApplied": None,
                "resultsCount": len(body.get("candidates") or []),
                "weightsUsed": effective.as_dict(),
            },
        )

    return SearchOutcome(body=body, cache_hit=cache_hit)
