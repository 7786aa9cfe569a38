"""Candidate scoring against a parsed search query.

Three sub-scores in [0, 1] are combined with configurable weights:
skill match, experience relevance and cultural fit. Every score is rounded
to three decimals; ``reasoning`` explains the result in one line.
"""
from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass
from typing import Any, Iterable

from scoring.query import ParsedQuery

logger = logging.getLogger(__name__)

BASE_SCORE = 0.1
MAX_SKILL_SCORE = 0.9
SKILL_SPAN = 0.8
TITLE_HIT_SCORE = 0.7
DESCRIPTION_HIT_SCORE = 0.5
MAX_EXPERIENCE_SCORE = 0.8
CULTURE_SIGNAL_SCORE = 0.5

FALLBACK_REASONING = "Overall assessment based on profile."


@dataclass(frozen=True)
class Weights:
    """Relative weight of each sub-score; must sum to ~1."""
    w_skill: float = 0.4
    w_experience: float = 0.3
    w_culture: float = 0.3

    def as_dict(self) -> dict[str, float]:
        return {
            "w_skill": self.w_skill,
            "w_experience": self.w_experience,
            "w_culture": self.w_culture,
        }


@dataclass
class CandidateScore:
    """Score breakdown for one candidate."""
    candidate_id: str
    match_score: float
    skill_match: float
    experience_relevance: float
    cultural_fit: float
    reasoning: str
    percentile_rank: float = 0.0

    @property
    def breakdown(self) -> dict[str, float]:
        return {
            "skill_match": self.skill_match,
            "experience_relevance": self.experience_relevance,
            "cultural_fit": self.cultural_fit,
        }


def _skill_names(skills: Any) -> list[str]:
    """Lowercased skill names from any of the stored ``skills`` shapes."""
    if isinstance(skills, dict):
        merged = []
        for value in skills.values():
            if isinstance(value, list):
                merged.extend(value)
        skills = merged
    if not isinstance(skills, list):
        return []

    names = []
    for s in skills:
        if isinstance(s, dict):
            s = s.get("skill") or s.get("name")
        if isinstance(s, str) and s.strip():
            names.append(s.strip().lower())
    return names


def skill_match(query_skills: list[str], candidate_skills: Any) -> float:
    candidate = set(_skill_names(candidate_skills))
    if not query_skills or not candidate:
        return BASE_SCORE

    matched = sum(1 for s in query_skills if s.lower() in candidate)
    return min(BASE_SCORE + SKILL_SPAN * matched / len(query_skills), MAX_SKILL_SCORE)


def experience_relevance(keywords: list[str], work_experience: Any) -> float:
    if not keywords or not isinstance(work_experience, list) or not work_experience:
        return BASE_SCORE

    wanted = [k.lower() for k in keywords if k]
    score = BASE_SCORE
    for exp in work_experience:
        if not isinstance(exp, dict):
            continue
        title = (exp.get("title") or exp.get("job_title") or "").lower()
        description = (exp.get("description") or "").lower()
        if any(k in title for k in wanted):
            score = max(score, TITLE_HIT_SCORE)
        elif any(k in description for k in wanted):
            score = max(score, DESCRIPTION_HIT_SCORE)
    return min(score, MAX_EXPERIENCE_SCORE)


def cultural_fit(resume_text: str | None, work_experience: Any = None) -> float:
    """Signal-only placeholder: some narrative text available or not."""
    text = resume_text or ""
    if not text.strip() and isinstance(work_experience, list):
        text = " ".join(
            exp.get("description") or ""
            for exp in work_experience
            if isinstance(exp, dict)
        )
    return CULTURE_SIGNAL_SCORE if text.strip() else BASE_SCORE


def reasoning(skill: float, experience: float, culture: float) -> str:
    parts = []
    if skill > 0.65:
        parts.append("Strong skill match.")
    elif skill > 0.3:
        parts.append("Moderate skill overlap.")
    if experience > 0.6:
        parts.append("Relevant experience found.")
    elif experience > 0.3:
        parts.append("Some relevant experience.")
    if culture > 0.5:
        parts.append("Potential cultural fit indicated.")
    return " ".join(parts) or FALLBACK_REASONING


def score_candidate(candidate: Any, parsed: ParsedQuery, weights: Weights) -> CandidateScore:
    """Score a Candidate row (or any object with the same attributes)."""
    skill = skill_match(parsed.skills, candidate.skills)
    experience = experience_relevance(parsed.keywords, candidate.work_experience)
    culture = cultural_fit(candidate.resume_text, candidate.work_experience)

    total = (
        weights.w_skill * skill
        + weights.w_experience * experience
        + weights.w_culture * culture
    )
    return CandidateScore(
        candidate_id=candidate.id,
        match_score=round(total, 3),
        skill_match=round(skill, 3),
        experience_relevance=round(experience, 3),
        cultural_fit=round(culture, 3),
        reasoning=reasoning(skill, experience, culture),
    )


def assign_percentile_ranks(scores: list[CandidateScore]) -> list[CandidateScore]:
    """Set ``percentile_rank``: share of the pool scoring at or below each candidate."""
    ranks = percentile_ranks(s.match_score for s in scores)
    for score, rank in zip(scores, ranks):
        score.percentile_rank = rank
    return scores


def percentile_ranks(values: Iterable[float]) -> list[float]:
    values = list(values)
    n = len(values)
    if n == 0:
        return []
    ordered = sorted(values)
    return [round(100.0 * bisect_right(ordered, v) / n, 2) for v in values]


def rank_candidates(
    candidates: Iterable[Any],
    parsed: ParsedQuery,
    weights: Weights,
    *,
    top_n: int | None = None,
) -> list[tuple[Any, CandidateScore]]:
    """Score, rank and truncate; percentiles are computed over the whole pool."""
    candidates = list(candidates)
    scores = assign_percentile_ranks([score_candidate(c, parsed, weights) for c in candidates])

    ranked = sorted(zip(candidates, scores), key=lambda pair: pair[1].match_score, reverse=True)
    logger.debug(f"Ranked {len(ranked)} candidates")
    return ranked[:top_n] if top_n else ranked
