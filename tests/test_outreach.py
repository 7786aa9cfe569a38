from __future__ import annotations

from conftest import make_candidate
from recruit.pipelines.outreach import (
    build_outreach_profile,
    extract_key_skills,
    load_outreach_profile,
    summarize_education,
    summarize_experience,
)


def test_key_skills_from_list_takes_first_five():
    skills = ["a", {"skill": "b"}, {"name": "c"}, {"other": "x"}, "", "f", "g"]
    assert extract_key_skills(skills) == ["a", "b", "c"]


def test_key_skills_from_technical_and_soft():
    skills = {"technical": ["t1", "t2", "t3", "t4"], "soft": ["s1", "", "s3"]}
    assert extract_key_skills(skills) == ["t1", "t2", "t3", "s1"]


def test_key_skills_other_shapes():
    assert extract_key_skills(None) == []
    assert extract_key_skills("React") == []
    assert extract_key_skills({"technical": "React"}) == []


def test_experience_summary():
    experience = [
        {"title": "Engineer", "company": "Acme"},
        {"job_title": "Intern"},
        {"title": "Ignored", "company": "Third"},
    ]
    assert summarize_experience(experience) == "Engineer at Acme; Intern at N/A"
    assert summarize_experience([]) == ""
    assert summarize_experience(None) == ""


def test_education_summary():
    assert summarize_education([{"degree": "BSc", "institution": "MIT"}, {"degree": "MSc"}]) == "BSc from MIT"
    assert summarize_education([{"institution": "MIT"}]) == "N/A from MIT"
    assert summarize_education([]) == ""


def test_build_profile_headline_falls_back_to_first_job():
    candidate = make_candidate(
        title=None,
        work_experience=[{"job_title": "Data Engineer", "company": "Initech"}],
    )
    profile = build_outreach_profile(candidate)
    assert profile.headline == "Data Engineer"
    assert profile.experience_summary == "Data Engineer at Initech"


def test_build_profile_empty_values_become_none():
    candidate = make_candidate(
        name=None,
        title="",
        skills=[],
        work_experience=[],
        education=None,
        phone=None,
    )
    profile = build_outreach_profile(candidate)
    assert profile.name == "N/A"
    assert profile.headline is None
    assert profile.key_skills is None
    assert profile.experience_summary is None
    assert profile.education_summary is None
    assert profile.phone is None
    assert profile.email == "jane@example.com"


def test_load_outreach_profile(seed, run_with_session):
    candidate = make_candidate()
    seed(candidate)

    profile = run_with_session(lambda s: load_outreach_profile(s, candidate.id))
    assert profile.id == candidate.id
    assert profile.headline == "Senior React Developer"
    assert profile.key_skills == ["React", "TypeScript", "Node.js"]
    assert profile.education_summary == "B.S. Computer Science from MIT"

    assert run_with_session(lambda s: load_outreach_profile(s, "cdoesnotexist000000000000")) is None
