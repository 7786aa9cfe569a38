"""Lookup tables for education and experience analytics.

Rules are checked in order; the first match wins.
"""

UNKNOWN = "Unknown"
NOT_SPECIFIED = "Not Specified"

# (category, substrings, prefixes)
EDUCATION_RULES = [
    ("Bachelor's", ("bachelor",), ("bs", "b.s")),
    ("Master's", ("master",), ("ms", "m.s", "mba")),
    ("PhD", ("phd", "doctorate"), ()),
    ("Associate's", ("associate",), ()),
    ("High School/GED", ("high school", "ged"), ()),
]

ONGOING_END_DATES = ("present", "current")

# (label, lower bound exclusive, upper bound inclusive); years, None = open
EXPERIENCE_BINS = [
    ("0-2 Years", None, 2),
    ("3-5 Years", 2, 5),
    ("6-8 Years", 5, 8),
    ("9-11 Years", 8, 11),
    ("12+ Years", 11, None),
]
