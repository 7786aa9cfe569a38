"""Outreach profile (a condensed candidate view for messaging) and outreach history.

The resume JSON fields are loosely structured, so ``build_outreach_profile``
accepts the shapes the parser is known to produce.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import pendulum
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recruit import models
from recruit.encryption import decrypt_field

logger = logging.getLogger(__name__)

MAX_KEY_SKILLS = 5
MAX_TECHNICAL_SKILLS = 3
MAX_SOFT_SKILLS = 2
SUMMARY_EXPERIENCES = 2
MISSING = "N/A"


class OutreachProfileError(Exception):
    """Raised when an outreach profile cannot be loaded."""
    pass


class OutreachHistoryError(Exception):
    """Raised when the outreach history cannot be loaded."""
    pass


@dataclass
class OutreachProfile:
    """Condensed candidate view."""
    id: str
    name: str
    email: str | None
    phone: str | None
    headline: str | None
    key_skills: list[str] | None
    experience_summary: str | None
    education_summary: str | None


def extract_key_skills(skills: Any) -> list[str]:
    """Up to five headline skills from a list or a technical/soft mapping."""
    if isinstance(skills, list):
        picked = []
        for s in skills[:MAX_KEY_SKILLS]:
            if isinstance(s, str):
                picked.append(s)
            elif isinstance(s, dict):
                picked.append(s.get("skill") or s.get("name"))
        return [s for s in picked if s]

    if isinstance(skills, dict):
        picked = []
        technical = skills.get("technical")
        soft = skills.get("soft")
        if isinstance(technical, list):
            picked.extend(technical[:MAX_TECHNICAL_SKILLS])
        if isinstance(soft, list):
            picked.extend(soft[:MAX_SOFT_SKILLS])
        return [s for s in picked if s]

    return []


def _job_title(exp: dict) -> str | None:
    return exp.get("title") or exp.get("job_title")


def summarize_experience(work_experience: Any) -> str:
    if not isinstance(work_experience, list) or not work_experience:
        return ""
    parts = []
    for exp in work_experience[:SUMMARY_EXPERIENCES]:
        exp = exp if isinstance(exp, dict) else {}
        parts.append(f"{_job_title(exp) or MISSING} at {exp.get('company') or MISSING}")
    return "; ".join(parts)


def summarize_education(education: Any) -> str:
    if not isinstance(education, list) or not education:
        return ""
    first = education[0] if isinstance(education[0], dict) else {}
    return f"{first.get('degree') or MISSING} from {first.get('institution') or MISSING}"


def build_outreach_profile(candidate: models.Candidate) -> OutreachProfile:
    """Transform a candidate row into its outreach profile."""
    headline = candidate.title or ""

    work_experience = candidate.work_experience
    if not headline and isinstance(work_experience, list) and work_experience:
        first = work_experience[0]
        if isinstance(first, dict) and _job_title(first):
            headline = _job_title(first)

    key_skills = extract_key_skills(candidate.skills)

    return OutreachProfile(
        id=candidate.id,
        name=candidate.name or MISSING,
        email=candidate.email,
        phone=decrypt_field(candidate.phone),
        headline=headline or None,
        key_skills=key_skills or None,
        experience_summary=summarize_experience(work_experience) or None,
        education_summary=summarize_education(candidate.education) or None,
    )


async def load_outreach_profile(session: AsyncSession, candidate_id: str) -> OutreachProfile | None:
    """Fetch a candidate and build its profile; None when it does not exist."""
    try:
        result = await session.execute(
            select(models.Candidate).where(models.Candidate.id == candidate_id)
        )
        candidate = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error fetching outreach profile for {candidate_id}: {e}", exc_info=True)
        raise OutreachProfileError(str(e)) from e

    if candidate is None:
        return None

    return build_outreach_profile(candidate)


def _iso(value) -> str | None:
    return pendulum.instance(value, tz="UTC").to_iso8601_string() if value else None


def outreach_history_item(outreach: models.EmailOutreach) -> dict[str, Any]:
    return {
        "id": outreach.id,
        "candidateId": outreach.candidate_id,
        "recipientEmail": outreach.recipient_email,
        "subject": outreach.subject,
        "status": outreach.status,
        "resendMessageId": outreach.resend_message_id,
        "sentAt": _iso(outreach.sent_at),
        "deliveredAt": _iso(outreach.delivered_at),
        "openedAt": _iso(outreach.opened_at),
        "clickedAt": _iso(outreach.clicked_at),
    }


async def load_outreach_history(
    session: AsyncSession,
    *,
    page: int = 1,
    page_size: int = 10,
) -> dict[str, Any]:
    """One page of sent outreach, most recently sent first.

    Returns ``{data, total, page, pageSize, totalPages}``; a page past the end
    has empty ``data``.
    """
    query = (
        select(models.EmailOutreach)
        .order_by(
            models.EmailOutreach.sent_at.desc().nulls_last(),
            models.EmailOutreach.created_at.desc(),
        )
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    try:
        rows = (await session.execute(query)).scalars().all()
        total = int((await session.execute(select(func.count(models.EmailOutreach.id)))).scalar_one())
    except SQLAlchemyError as e:
        logger.error(f"Error fetching outreach history: {e}", exc_info=True)
        raise OutreachHistoryError(str(e)) from e

    return {
        "data": [outreach_history_item(o) for o in rows],
        "total": total,
        "page": page,
        "pageSize": page_size,
        "totalPages": math.ceil(total / page_size),
    }
