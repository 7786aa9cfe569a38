"""Analytics aggregations over the candidate table.

Each ``*_distribution``/``*_breakdown`` function is a single pass over rows
already fetched; the ``load_*`` coroutines fetch only the columns needed and
wrap database failures in ``AnalyticsError``.
"""
from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

import pendulum
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config.education_levels import EXPERIENCE_BINS, NOT_SPECIFIED, UNKNOWN
from recruit import models
from recruit.pipelines.normalization import (
    education_levels_for,
    experience_months,
    normalize_skill,
)

logger = logging.getLogger(__name__)

DEFAULT_PERIOD_DAYS = 30
MAX_PERIOD_DAYS = 36500
PERIOD_PATTERN = re.compile(r"^(\d+)d$")


class AnalyticsError(Exception):
    """Raised when an analytics query fails."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass
class EmailStats:
    """Email funnel counts for a look-back period."""
    sent: int
    delivered: int
    opened: int
    clicked: int
    period_days: int


# ---------------------------------------------------------------------------
# Pure aggregations
# ---------------------------------------------------------------------------

def skills_distribution(skill_lists: Iterable[Any], *, limit: int | None = None) -> list[dict]:
    """Count normalized skills across candidates, most common first."""
    counts: Counter[str] = Counter()
    for skills in skill_lists:
        if not isinstance(skills, list):
            continue
        for skill in skills:
            normalized = normalize_skill(skill)
            if normalized:
                counts[normalized] += 1

    # Counter.most_common keeps first-seen order among equal counts
    chart = [{"name": name, "count": count} for name, count in counts.most_common()]
    return chart[:limit] if limit else chart


def education_breakdown(education_lists: Iterable[Any]) -> list[dict]:
    """Count candidates per normalized education level, largest first."""
    counts: Counter[str] = Counter()
    for education in education_lists:
        levels = education_levels_for(education)
        if levels == NOT_SPECIFIED:
            counts[NOT_SPECIFIED] += 1
            continue
        for level in sorted(levels):
            counts[level] += 1

    return [{"name": name, "value": value} for name, value in counts.most_common()]


def experience_bin(total_months: float) -> str:
    """Bin label for a total experience in months."""
    years = total_months / 12
    for label, lower, upper in EXPERIENCE_BINS:
        above_lower = lower is None or years > lower
        below_upper = upper is None or years <= upper
        if above_lower and below_upper:
            return label
    return EXPERIENCE_BINS[0][0]


def experience_distribution(
    experience_lists: Iterable[Any],
    *,
    now: pendulum.DateTime | None = None,
) -> list[dict]:
    """Histogram of total years of experience, in fixed bin order."""
    now = now or pendulum.now("UTC")
    bins: dict[str, int] = {label: 0 for label, _, _ in EXPERIENCE_BINS}
    bins[UNKNOWN] = 0

    for experiences in experience_lists:
        total = experience_months(experiences, now=now)
        if total == 0 and (not isinstance(experiences, list) or not experiences):
            bins[UNKNOWN] += 1
            continue
        bins[experience_bin(total)] += 1

    return [{"years": label, "count": count} for label, count in bins.items()]


def average_skill_count(skill_lists: list[Any]) -> float:
    """Mean number of listed skills, rounded half-up to one decimal."""
    if not skill_lists:
        return 0.0
    total = sum(len(skills) for skills in skill_lists if isinstance(skills, list))
    average = Decimal(total) / Decimal(len(skill_lists))
    return float(average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def parse_period(period: str | None) -> int:
    """Days in a ``<N>d`` period string.

    Defaults to 30 when absent, malformed or longer than ``MAX_PERIOD_DAYS``.
    """
    if period:
        match = PERIOD_PATTERN.match(period.strip())
        if match and int(match.group(1)) <= MAX_PERIOD_DAYS:
            return int(match.group(1))
    return DEFAULT_PERIOD_DAYS


def period_start(days: int, *, now: pendulum.DateTime | None = None) -> pendulum.DateTime:
    """Start of the day ``days`` days before ``now``."""
    now = now or pendulum.now("UTC")
    return now.subtract(days=days).start_of("day")


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------

async def _load_column(session: AsyncSession, column, what: str) -> list[Any]:
    try:
        result = await session.execute(select(column))
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching {what}: {e}", exc_info=True)
        raise AnalyticsError(f"Error fetching {what}") from e


async def load_skills_distribution(session: AsyncSession, *, limit: int | None = None) -> list[dict]:
    skills = await _load_column(session, models.Candidate.skills, "skills distribution")
    chart = skills_distribution(skills, limit=limit)
    logger.info(f"Skills distribution: {len(chart)} distinct skills over {len(skills)} candidates")
    return chart


async def load_education_breakdown(session: AsyncSession) -> list[dict]:
    education = await _load_column(session, models.Candidate.education, "education breakdown")
    return education_breakdown(education)


async def load_experience_distribution(
    session: AsyncSession,
    *,
    now: pendulum.DateTime | None = None,
) -> list[dict]:
    experience = await _load_column(session, models.Candidate.work_experience, "experience distribution")
    return experience_distribution(experience, now=now)


async def load_average_skills(session: AsyncSession) -> float:
    skills = await _load_column(session, models.Candidate.skills, "average skills")
    return average_skill_count(skills)


async def count_candidates(session: AsyncSession) -> int:
    try:
        result = await session.execute(select(func.count(models.Candidate.id)))
        return int(result.scalar_one())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching total candidates: {e}", exc_info=True)
        raise AnalyticsError("Error fetching total candidates") from e


async def count_new_candidates(
    session: AsyncSession,
    *,
    days: int = 30,
    now: pendulum.DateTime | None = None,
) -> int:
    """Candidates created within the last ``days`` days."""
    now = now or pendulum.now("UTC")
    since = models.to_naive_utc(now.subtract(days=days))
    try:
        result = await session.execute(
            select(func.count(models.Candidate.id)).where(models.Candidate.created_at >= since)
        )
        return int(result.scalar_one())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching new candidates: {e}", exc_info=True)
        raise AnalyticsError("Error fetching new candidates") from e


async def load_email_stats(
    session: AsyncSession,
    *,
    period: str | None = None,
    now: pendulum.DateTime | None = None,
) -> EmailStats:
    """Sent/delivered/opened/clicked counts for outreach created in the period."""
    days = parse_period(period)
    since = models.to_naive_utc(period_start(days, now=now))

    query = select(
        models.EmailOutreach.sent_at,
        models.EmailOutreach.delivered_at,
        models.EmailOutreach.opened_at,
        models.EmailOutreach.clicked_at,
    ).where(models.EmailOutreach.created_at >= since)

    try:
        result = await session.execute(query)
        rows = result.all()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching email outreach stats: {e}", exc_info=True)
        raise AnalyticsError("Error fetching email outreach stats") from e

    return EmailStats(
        sent=sum(1 for r in rows if r.sent_at),
        delivered=sum(1 for r in rows if r.delivered_at),
        opened=sum(1 for r in rows if r.opened_at),
        clicked=sum(1 for r in rows if r.clicked_at),
        period_days=days,
    )
