"""Structured view of a recruiter's free-text search query."""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field

from scoring.skills import SkillExtractor

logger = logging.getLogger(__name__)

# "... in Berlin", "... in San Francisco, CA"
LOCATION_PATTERN = re.compile(r"\bin\s+([A-Z][\w.'-]*(?:[\s,]+[A-Z][\w.'-]*)*)")

LEADING_FILLER = re.compile(
    r"^(?:(?:please\s+)?(?:find|search\s+for|looking\s+for|look\s+for|show\s+me|get\s+me|i\s+need|we\s+need)\s+)?"
    r"(?:(?:a|an|the|some)\s+)?",
    re.IGNORECASE,
)
ROLE_STOP = re.compile(r"\s+(?:in|with|who|that|having|skilled|experienced\s+in)\s+", re.IGNORECASE)

_extractor: SkillExtractor | None = None


def get_skill_extractor() -> SkillExtractor:
    global _extractor
    if _extractor is None:
        _extractor = SkillExtractor()
    return _extractor


@dataclass
class ParsedQuery:
    """Keywords, location and skills pulled from a search query."""
    keywords: list[str] = field(default_factory=list)
    location: str | None = None
    skills: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def extract_location(query: str, *, skills: list[str] = ()) -> str | None:
    """First capitalized "in <Place>" phrase that is not one of ``skills``."""
    skill_names = {s.lower() for s in skills}
    for match in LOCATION_PATTERN.finditer(query):
        place = match.group(1).strip(" ,")
        if place and place.lower() not in skill_names:
            return place
    return None


def extract_keywords(query: str) -> list[str]:
    """Words of the role phrase, with leading filler and trailing qualifiers removed."""
    text = LEADING_FILLER.sub("", query.strip(), count=1)
    text = ROLE_STOP.split(text, maxsplit=1)[0]
    text = text.strip(" .,;:!?")
    keywords: list[str] = []
    for word in text.lower().split():
        word = word.strip(" .,;:!?()")
        if word and word not in keywords:
            keywords.append(word)
    return keywords


def parse_query(query: str) -> ParsedQuery:
    """Parse a free-text query such as "Find a senior React developer in Berlin with AWS"."""
    query = (query or "").strip()
    if not query:
        return ParsedQuery()

    skills = [s.canonical_skill for s in get_skill_extractor().extract(query)]
    parsed = ParsedQuery(
        keywords=extract_keywords(query),
        location=extract_location(query, skills=skills),
        skills=skills,
    )
    logger.debug(f"Parsed query {query!r}: {parsed}")
    return parsed
