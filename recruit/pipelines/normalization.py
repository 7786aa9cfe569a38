"""Normalization of raw resume JSON fields for analytics.

Skills, education levels and work-experience dates arrive in whatever shape
the resume parser produced; these helpers reduce them to comparable values.
"""
from __future__ import annotations

import logging
from typing import Any

import pendulum
from pendulum.parsing.exceptions import ParserError

from config.education_levels import (
    EDUCATION_RULES,
    NOT_SPECIFIED,
    ONGOING_END_DATES,
    UNKNOWN,
)

logger = logging.getLogger(__name__)


def normalize_skill(skill: Any) -> str | None:
    """Trim and lowercase a skill; None for non-strings and blanks."""
    if not isinstance(skill, str):
        return None
    normalized = skill.strip().lower()
    return normalized or None


def normalize_education_level(level: str | None = None, degree: str | None = None) -> str:
    """Map a free-text education level/degree to a reporting category.

    ``level`` is preferred over ``degree``. Unrecognized values are returned
    capitalized (first letter upper, rest lower).
    """
    source = level or degree or UNKNOWN
    target = source.strip().lower()

    for category, contains, prefixes in EDUCATION_RULES:
        if any(token in target for token in contains):
            return category
        if any(target.startswith(prefix) for prefix in prefixes):
            return category

    if target in ("unknown", ""):
        return UNKNOWN

    source = source.strip()
    return source[:1].upper() + source[1:].lower()


def education_levels_for(education: Any) -> set[str] | str:
    """Distinct known levels for one candidate's education list.

    Returns ``NOT_SPECIFIED`` for a missing/empty list and ``{UNKNOWN}`` when
    entries exist but none normalize to a known level.
    """
    if not isinstance(education, list) or not education:
        return NOT_SPECIFIED

    levels: set[str] = set()
    for entry in education:
        if not isinstance(entry, dict):
            continue
        normalized = normalize_education_level(entry.get("level"), entry.get("degree"))
        if normalized != UNKNOWN:
            levels.add(normalized)

    return levels or {UNKNOWN}


def parse_date(value: Any) -> pendulum.DateTime | None:
    """Parse a resume date (ISO, ``YYYY-MM``, ``YYYY``...); None when invalid."""
    if not isinstance(value, str) or not value.strip():
        return None
    value = value.strip()
    try:
        if len(value) == 7 and value[4] == "-":
            return pendulum.datetime(int(value[:4]), int(value[5:7]), 1)
        parsed = pendulum.parse(value, strict=False)
    except (ValueError, OverflowError, ParserError):
        return None
    if not isinstance(parsed, pendulum.DateTime):
        # Bare dates/times come back as Date/Time objects
        if isinstance(parsed, pendulum.Date):
            return pendulum.datetime(parsed.year, parsed.month, parsed.day)
        return None
    return parsed


def calculate_months(
    start_date: Any,
    end_date: Any = None,
    *,
    now: pendulum.DateTime | None = None,
) -> int:
    """Whole calendar months between two resume dates.

    A missing, ``present`` or ``current`` end means ``now``. Unparseable dates
    and reversed ranges give 0.
    """
    if not start_date:
        return 0

    start = parse_date(start_date)
    if not end_date or (isinstance(end_date, str) and end_date.strip().lower() in ONGOING_END_DATES):
        end = now or pendulum.now("UTC")
    else:
        end = parse_date(end_date)

    if start is None or end is None:
        return 0

    months = (end.year - start.year) * 12
    months -= start.month
    months += end.month
    return months if months > 0 else 0


def experience_months(experiences: Any, *, now: pendulum.DateTime | None = None) -> int:
    """Total months across work-experience entries.

    A positive numeric ``durationInMonths`` wins over the date range.
    """
    if not isinstance(experiences, list):
        return 0

    total = 0
    for exp in experiences:
        if not isinstance(exp, dict):
            continue
        duration = exp.get("durationInMonths")
        if isinstance(duration, (int, float)) and not isinstance(duration, bool) and duration > 0:
            total += duration
            continue
        start = exp.get("startDate") or exp.get("start_date")
        if start:
            end = exp.get("endDate") or exp.get("end_date")
            total += calculate_months(start, end, now=now)
    return total
