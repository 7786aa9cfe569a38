"""Skill recognition in short free text (recruiter queries) using the taxonomy.

Exact synonym matches on word boundaries come first; remaining canonical
skills are then fuzzy-matched token by token with rapidfuzz.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from rapidfuzz import fuzz, process

from config.skill_taxonomy import SKILL_TAXONOMY
from recruit.config import settings

logger = logging.getLogger(__name__)

# Tokens shorter than this are never fuzzy-matched ("go" vs "to")
MIN_FUZZY_TOKEN_LENGTH = 4

TOKEN_PATTERN = re.compile(r"[a-z0-9][a-z0-9.+#/-]*")


@dataclass
class ExtractedSkill:
    """A skill recognized in text."""
    canonical_skill: str
    raw_text: str
    confidence: float
    span_start: int = -1
    span_end: int = -1
    method: str = "exact"  # exact, fuzzy


@dataclass
class SkillTaxonomy:
    """Skill taxonomy entry with synonyms."""
    canonical_skill: str
    synonyms: list[str] = field(default_factory=list)
    category: str = ""


def _synonym_pattern(synonym: str) -> re.Pattern:
    # \b does not work around symbols such as "c++" or "c#"
    return re.compile(rf"(?<![\w.+#]){re.escape(synonym)}(?![\w+#])", re.IGNORECASE)


class SkillExtractor:
    """Taxonomy-driven skill extractor for short texts."""

    def __init__(self, taxonomy: list[SkillTaxonomy] | None = None) -> None:
        self.taxonomy = taxonomy or self._load_default_taxonomy()

        self._canonical_skills: list[str] = []
        self._synonym_patterns: list[tuple[str, str, re.Pattern]] = []  # (synonym, canonical, pattern)
        self._fuzzy_choices: dict[str, str] = {}  # spelling -> canonical

        self._build_indices()

        logger.debug(f"Loaded {len(self.taxonomy)} skills with {len(self._synonym_patterns)} synonyms")

    @staticmethod
    def _load_default_taxonomy() -> list[SkillTaxonomy]:
        return [
            SkillTaxonomy(
                canonical_skill=entry["canonical_skill"],
                synonyms=list(entry.get("synonyms", [])),
                category=entry.get("category", ""),
            )
            for entry in SKILL_TAXONOMY
        ]

    def _build_indices(self) -> None:
        for tax in self.taxonomy:
            canonical = tax.canonical_skill
            self._canonical_skills.append(canonical)

            spellings = {s.lower() for s in tax.synonyms}
            if len(canonical) >= 3:
                spellings.add(canonical.lower())
            # Longest first so "spring boot" wins over "spring"
            for syn in sorted(spellings, key=len, reverse=True):
                self._synonym_patterns.append((syn, canonical, _synonym_pattern(syn)))
                if len(syn) >= MIN_FUZZY_TOKEN_LENGTH and " " not in syn:
                    self._fuzzy_choices[syn] = canonical

    def extract(
        self,
        text: str,
        *,
        min_confidence: float | None = None,
        max_results: int | None = None,
    ) -> list[ExtractedSkill]:
        """Recognize skills in ``text``, in order of first appearance."""
        if not text or not text.strip():
            return []

        min_conf = min_confidence if min_confidence is not None else settings.skills.min_confidence
        max_res = max_results or settings.skills.max_skills_per_query

        results: list[ExtractedSkill] = []
        seen_skills: set[str] = set()
        claimed: list[tuple[int, int]] = []

        # 1. Exact synonym matching
        for synonym, canonical, pattern in self._synonym_patterns:
            if canonical in seen_skills:
                continue
            match = pattern.search(text)
            if match is None:
                continue
            start, end = match.span()
            if any(start < c_end and end > c_start for c_start, c_end in claimed):
                continue
            results.append(ExtractedSkill(
                canonical_skill=canonical,
                raw_text=match.group(0),
                confidence=0.95,
                span_start=start,
                span_end=end,
                method="exact",
            ))
            seen_skills.add(canonical)
            claimed.append((start, end))

        # 2. Fuzzy matching of leftover tokens (typos such as "kubernets")
        threshold = settings.skills.fuzzy_threshold
        for token_match in TOKEN_PATTERN.finditer(text.lower()):
            token = token_match.group(0).rstrip(".")
            start, end = token_match.start(), token_match.start() + len(token)
            if len(token) < MIN_FUZZY_TOKEN_LENGTH:
                continue
            if any(start < c_end and end > c_start for c_start, c_end in claimed):
                continue

            best = process.extractOne(token, list(self._fuzzy_choices), scorer=fuzz.ratio)
            if best is None:
                continue
            spelling, score, _ = best
            canonical = self._fuzzy_choices[spelling]
            if score < threshold or canonical in seen_skills:
                continue

            results.append(ExtractedSkill(
                canonical_skill=canonical,
                raw_text=text[start:end],
                confidence=score / 100.0,
                span_start=start,
                span_end=end,
                method="fuzzy",
            ))
            seen_skills.add(canonical)
            claimed.append((start, end))

        results = [r for r in results if r.confidence >= min_conf]
        results.sort(key=lambda r: r.span_start)

        logger.debug(f"Extracted {len(results)} skills from text of length {len(text)}")
        return results[:max_res]
