"""Ingestion of candidates submitted by internal systems.

Input is validated with Pydantic, mapped to the candidate shape the rest of
the service reads, and persisted.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

import pendulum
from pydantic import BaseModel, Field, HttpUrl, ValidationError, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import models
from ..encryption import encrypt_field

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CandidateValidationError(Exception):
    """Raised when raw candidate data fails validation."""

    def __init__(self, field_errors: dict[str, list[str]]):
        self.field_errors = field_errors
        fields = ", ".join(sorted(field_errors))
        super().__init__(f"Invalid candidate data: {fields}")


class CandidateIngestError(Exception):
    """Raised when a validated candidate cannot be persisted."""
    pass


class RawInternalCandidateData(BaseModel):
    """Candidate record as delivered by an internal system."""
    fullName: str = Field(min_length=1)
    contactEmail: str = Field(pattern=EMAIL_PATTERN)
    yearsOfExperience: float = Field(ge=0, le=50)
    primarySkills: list[str] = Field(min_length=1)
    linkedinProfileUrl: HttpUrl | None = None
    phone: str | None = None
    address: str | None = None
    resumeText: str | None = None

    @field_validator("fullName")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Full name cannot be empty.")
        return v


def _field_errors(exc: ValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "__root__"
        errors.setdefault(loc, []).append(err["msg"])
    return errors


def process_internal_candidate_data(raw: Any) -> dict[str, Any]:
    """Validate raw data and map it to the processed candidate record.

    The record carries ``id, name, email, skills, title, processedTimestamp``
    plus the validated ``sourceUrl`` and the optional contact and resume fields.

    Raises:
        CandidateValidationError: With per-field messages when ``raw`` is invalid
    """
    try:
        data = RawInternalCandidateData.model_validate(raw)
    except ValidationError as e:
        field_errors = _field_errors(e)
        logger.warning(f"Invalid internal candidate data: {field_errors}")
        raise CandidateValidationError(field_errors) from e

    return {
        "id": models.new_cuid(),
        "name": data.fullName,
        "email": data.contactEmail,
        "skills": list(data.primarySkills),
        "title": f"{data.primarySkills[0]} Developer",
        "processedTimestamp": pendulum.now("UTC").to_iso8601_string(),
        "sourceUrl": str(data.linkedinProfileUrl) if data.linkedinProfileUrl else None,
        "phone": data.phone,
        "address": data.address,
        "resumeText": data.resumeText,
    }


async def ingest_candidate(
    session: AsyncSession,
    raw: Mapping[str, Any],
) -> dict[str, Any]:
    """Validate, map and persist one candidate; returns the processed record."""
    processed = process_internal_candidate_data(raw)

    candidate = models.Candidate(
        id=processed["id"],
        name=processed["name"],
        email=processed["email"],
        skills=processed["skills"],
        title=processed["title"],
        source_url=processed["sourceUrl"],
        phone=encrypt_field(processed["phone"]),
        address=encrypt_field(processed["address"]),
        resume_text=encrypt_field(processed["resumeText"]),
    )
    try:
        session.add(candidate)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to persist candidate {processed['id']}: {e}", exc_info=True)
        raise CandidateIngestError(str(e)) from e

    logger.info(f"Ingested candidate {candidate.id} ({len(processed['skills'])} skills)")
    return processed
