from __future__ import annotations

from recruit.redaction import REDACTED_PLACEHOLDER, redact_candidate_pii, redact_email_advanced


def test_redacts_populated_pii_fields():
    candidate = {
        "id": "c1",
        "name": "Jane",
        "email": "jane@example.com",
        "phone": "555-0100",
        "address": "1 Main St",
        "skills": ["React"],
    }
    redacted = redact_candidate_pii(candidate)
    assert redacted == {
        "id": "c1",
        "name": "Jane",
        "email": REDACTED_PLACEHOLDER,
        "phone": REDACTED_PLACEHOLDER,
        "address": REDACTED_PLACEHOLDER,
        "skills": ["React"],
    }


def test_input_is_not_mutated():
    candidate = {"email": "jane@example.com"}
    redact_candidate_pii(candidate)
    assert candidate == {"email": "jane@example.com"}


def test_empty_and_missing_values_are_left_alone():
    redacted = redact_candidate_pii({"email": None, "phone": "", "name": "Jane"})
    assert redacted == {"email": None, "phone": "", "name": "Jane"}
    assert "address" not in redacted


def test_redact_email_advanced():
    assert redact_email_advanced("jane@example.com") == "[REDACTED]@example.com"
    assert redact_email_advanced("not-an-email") == REDACTED_PLACEHOLDER
    assert redact_email_advanced("a@b@c") == REDACTED_PLACEHOLDER
    assert redact_email_advanced("") == REDACTED_PLACEHOLDER
    assert redact_email_advanced(None) == REDACTED_PLACEHOLDER
