from __future__ import annotations

import pendulum
import pytest

from recruit.pipelines.normalization import (
    calculate_months,
    education_levels_for,
    experience_months,
    normalize_education_level,
    normalize_skill,
    parse_date,
)

NOW = pendulum.datetime(2024, 6, 15, tz="UTC")


def test_normalize_skill_trims_and_lowercases():
    assert normalize_skill("  React ") == "react"
    assert normalize_skill("   ") is None
    assert normalize_skill(42) is None
    assert normalize_skill(None) is None


@pytest.mark.parametrize(
    "level, degree, expected",
    [
        ("Bachelor of Science", None, "Bachelor's"),
        (None, "BSc Computer Science", "Bachelor's"),
        (None, "B.S. Physics", "Bachelor's"),
        ("Master's", None, "Master's"),
        (None, "MBA", "Master's"),
        (None, "M.S. Data Science", "Master's"),
        ("PhD", None, "PhD"),
        (None, "Doctorate in Education", "PhD"),
        ("Associate Degree", None, "Associate's"),
        ("High School Diploma", None, "High School/GED"),
        ("GED", None, "High School/GED"),
        (None, None, "Unknown"),
        ("   ", None, "Unknown"),
        ("unknown", None, "Unknown"),
        ("BOOTCAMP certificate", None, "Bootcamp certificate"),
    ],
)
def test_normalize_education_level(level, degree, expected):
    assert normalize_education_level(level, degree) == expected


def test_level_takes_precedence_over_degree():
    assert normalize_education_level("Master", "Bachelor of Arts") == "Master's"


def test_bachelor_rule_is_checked_before_master():
    assert normalize_education_level("bachelor and master combined") == "Bachelor's"


def test_education_levels_for_candidate():
    assert education_levels_for(None) == "Not Specified"
    assert education_levels_for([]) == "Not Specified"
    assert education_levels_for([{"degree": "Unknown"}, {"level": ""}]) == {"Unknown"}
    assert education_levels_for(
        [{"degree": "BS"}, {"degree": "Bachelor of Arts"}, {"level": "PhD"}]
    ) == {"Bachelor's", "PhD"}


def test_parse_date_formats():
    assert parse_date("2020-03") == pendulum.datetime(2020, 3, 1)
    assert parse_date("2021-07-04").month == 7
    assert parse_date("not a date") is None
    assert parse_date("") is None
    assert parse_date(None) is None


def test_calculate_months_between_dates():
    assert calculate_months("2020-01", "2021-03", now=NOW) == 14
    assert calculate_months("2020-05-20", "2020-06-01", now=NOW) == 1


def test_calculate_months_open_ended_uses_now():
    assert calculate_months("2023-06", None, now=NOW) == 12
    assert calculate_months("2023-06", "Present", now=NOW) == 12
    assert calculate_months("2023-06", "current", now=NOW) == 12


def test_calculate_months_invalid_or_reversed():
    assert calculate_months(None, "2020-01", now=NOW) == 0
    assert calculate_months("garbage", "2020-01", now=NOW) == 0
    assert calculate_months("2020-01", "garbage", now=NOW) == 0
    assert calculate_months("2022-01", "2020-01", now=NOW) == 0


def test_experience_months_prefers_positive_duration():
    experiences = [
        {"durationInMonths": 10, "startDate": "2000-01", "endDate": "2020-01"},
        {"durationInMonths": 0, "start_date": "2022-01", "end_date": "2023-01"},
        {"title": "No dates"},
        "not a dict",
    ]
    assert experience_months(experiences, now=NOW) == 22
    assert experience_months(None, now=NOW) == 0
