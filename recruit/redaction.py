"""PII redaction for candidate records leaving the service."""
from __future__ import annotations

from typing import Any, Mapping

REDACTED_PLACEHOLDER = "[REDACTED]"

PII_FIELDS = ("email", "phone", "address")


def redact_candidate_pii(candidate: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``candidate`` with populated PII fields replaced.

    Only truthy values are replaced: None, missing and empty-string fields are
    passed through unchanged, as is every non-PII field.
    """
    redacted = dict(candidate)
    for field_name in PII_FIELDS:
        if redacted.get(field_name):
            redacted[field_name] = REDACTED_PLACEHOLDER
    return redacted


def redact_email_advanced(email: str | None) -> str:
    """Redact the local part of an email, keeping the domain."""
    if not email:
        return REDACTED_PLACEHOLDER
    parts = email.split("@")
    if len(parts) == 2:
        return f"{REDACTED_PLACEHOLDER}@{parts[1]}"
    return REDACTED_PLACEHOLDER
