from __future__ import annotations

from types import SimpleNamespace

import pytest

from scoring.match import (
    FALLBACK_REASONING,
    Weights,
    cultural_fit,
    experience_relevance,
    percentile_ranks,
    rank_candidates,
    reasoning,
    score_candidate,
    skill_match,
)
from scoring.query import ParsedQuery, extract_keywords, extract_location, parse_query
from scoring.skills import SkillExtractor


@pytest.fixture(scope="module")
def extractor():
    return SkillExtractor()


def canonical(skills):
    return [s.canonical_skill for s in skills]


def test_extracts_synonyms_in_order_of_appearance(extractor):
    skills = extractor.extract("Node.js developer with ReactJS, k8s and golang")
    assert canonical(skills) == ["Node.js", "React", "Kubernetes", "Go"]
    assert all(s.method == "exact" for s in skills)


def test_symbols_and_dotted_names(extractor):
    assert canonical(extractor.extract("C# and C++ engineers")) == ["C#", "C++"]
    assert canonical(extractor.extract("Next.js frontend")) == ["Next.js"]


def test_short_words_are_not_skills(extractor):
    assert canonical(extractor.extract("ready to go, we trust our team")) == []


def test_fuzzy_match_catches_typos(extractor):
    skills = extractor.extract("experience with kubernets")
    assert canonical(skills) == ["Kubernetes"]
    assert skills[0].method == "fuzzy"
    assert 0.9 <= skills[0].confidence < 1.0


def test_empty_text(extractor):
    assert extractor.extract("") == []
    assert extractor.extract("   ") == []


def test_parse_query():
    parsed = parse_query("Find a senior React developer in Berlin with AWS")
    assert parsed.skills == ["React", "AWS"]
    assert parsed.location == "Berlin"
    assert parsed.keywords == ["senior", "react", "developer"]


def test_location_is_not_a_skill():
    assert extract_location("engineer experienced in Python", skills=["Python"]) is None
    assert extract_location("Data engineer in San Francisco") == "San Francisco"
    assert extract_location("engineer in london") is None


def test_keywords_strip_filler():
    assert extract_keywords("Looking for a data engineer who knows Spark") == ["data", "engineer"]
    assert extract_keywords("show me backend engineers") == ["backend", "engineers"]
    assert parse_query("   ") == ParsedQuery()


def test_skill_match():
    assert skill_match([], ["React"]) == 0.1
    assert skill_match(["React"], []) == 0.1
    assert skill_match(["React"], None) == 0.1
    assert skill_match(["React", "AWS"], ["react", "Go"]) == pytest.approx(0.5)
    assert skill_match(["React"], ["React"]) == pytest.approx(0.9)
    assert skill_match(["React"], [{"skill": "react"}]) == pytest.approx(0.9)
    assert skill_match(["Go"], {"technical": ["go"], "soft": []}) == pytest.approx(0.9)


def test_experience_relevance():
    experience = [
        {"title": "Backend Engineer", "description": "Python services"},
        {"job_title": "Intern", "description": "Built React widgets"},
    ]
    assert experience_relevance([], experience) == 0.1
    assert experience_relevance(["react"], None) == 0.1
    assert experience_relevance(["engineer"], experience) == 0.7
    assert experience_relevance(["react"], experience) == 0.5
    assert experience_relevance(["intern"], experience) == 0.7
    assert experience_relevance(["rust"], experience) == 0.1


def test_cultural_fit_is_deterministic():
    assert cultural_fit("Loves teamwork") == 0.5
    assert cultural_fit(None, [{"description": "Mentored juniors"}]) == 0.5
    assert cultural_fit("   ", [{"description": ""}]) == 0.1
    assert cultural_fit(None) == 0.1


@pytest.mark.parametrize(
    "scores, expected",
    [
        ((0.9, 0.7, 0.5), "Strong skill match. Relevant experience found."),
        ((0.5, 0.5, 0.6), "Moderate skill overlap. Some relevant experience. Potential cultural fit indicated."),
        ((0.1, 0.1, 0.5), FALLBACK_REASONING),
    ],
)
def test_reasoning(scores, expected):
    assert reasoning(*scores) == expected


def test_percentile_ranks():
    assert percentile_ranks([]) == []
    assert percentile_ranks([0.5]) == [100.0]
    assert percentile_ranks([0.2, 0.8, 0.5]) == [33.33, 100.0, 66.67]
    assert percentile_ranks([0.5, 0.5, 0.1]) == [100.0, 100.0, 33.33]


def _candidate(cid, skills, experience=None, resume_text=None):
    return SimpleNamespace(id=cid, skills=skills, work_experience=experience, resume_text=resume_text)


def test_score_candidate_weighted_sum():
    parsed = ParsedQuery(keywords=["developer"], skills=["React"])
    candidate = _candidate("c1", ["React"], [{"title": "React Developer"}], "bio")

    score = score_candidate(candidate, parsed, Weights(0.4, 0.3, 0.3))

    assert score.skill_match == 0.9
    assert score.experience_relevance == 0.7
    assert score.cultural_fit == 0.5
    assert score.match_score == round(0.4 * 0.9 + 0.3 * 0.7 + 0.3 * 0.5, 3)
    assert score.breakdown == {"skill_match": 0.9, "experience_relevance": 0.7, "cultural_fit": 0.5}


def test_rank_candidates_sorts_and_truncates_with_pool_percentiles():
    parsed = ParsedQuery(keywords=["developer"], skills=["React", "AWS"])
    pool = [
        _candidate("weak", ["Go"]),
        _candidate("strong", ["React", "AWS"], [{"title": "React Developer"}], "bio"),
        _candidate("middle", ["React"]),
    ]

    ranked = rank_candidates(pool, parsed, Weights(), top_n=2)

    assert [c.id for c, _ in ranked] == ["strong", "middle"]
    assert [s.percentile_rank for _, s in ranked] == [100.0, 66.67]


def test_match_score_uses_unrounded_sub_scores():
    query_skills = ["React", "AWS", "Go", "Rust", "Java", "Kotlin", "Swift"]
    parsed = ParsedQuery(keywords=["developer"], skills=query_skills)
    candidate = _candidate("c1", ["React", "AWS"])

    score = score_candidate(candidate, parsed, Weights(0.4, 0.3, 0.3))

    raw_skill = 0.1 + 0.8 * 2 / 7
    assert score.skill_match == 0.329
    assert score.match_score == round(0.4 * raw_skill + 0.3 * 0.1 + 0.3 * 0.1, 3) == 0.191
