"""Request and response models for the HTTP API."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Any | None = None


class RateLimitErrorResponse(ErrorResponse):
    """429 response."""
    retryAfter: int


class HealthCheck(BaseModel):
    status: str
    latency_ms: float | None = None
    detail: str | None = None


class HealthResponse(BaseModel):
    """Health check response; ``checks`` is omitted for quick checks."""
    status: str
    version: str
    timestamp: str
    checks: dict[str, HealthCheck] | None = None


class SkillCount(BaseModel):
    name: str
    count: int


class EducationCount(BaseModel):
    name: str
    value: int


class ExperienceBin(BaseModel):
    years: str
    count: int


class CountResponse(BaseModel):
    count: int


class AverageResponse(BaseModel):
    average: float


class EmailStatsResponse(BaseModel):
    sent: int
    delivered: int
    opened: int
    clicked: int
    periodDays: int


class OutreachProfileResponse(BaseModel):
    """Condensed candidate view for outreach."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    headline: str | None = None
    key_skills: list[str] | None = Field(default=None, alias="keySkills")
    experience_summary: str | None = Field(default=None, alias="experienceSummary")
    education_summary: str | None = Field(default=None, alias="educationSummary")


class OutreachHistoryItem(BaseModel):
    id: str
    candidateId: str | None = None
    recipientEmail: str
    subject: str | None = None
    status: str
    resendMessageId: str | None = None
    sentAt: str | None = None
    deliveredAt: str | None = None
    openedAt: str | None = None
    clickedAt: str | None = None


class OutreachHistoryResponse(BaseModel):
    """One page of outreach history."""
    data: list[OutreachHistoryItem]
    total: int
    page: int
    pageSize: int
    totalPages: int


class SearchWeights(BaseModel):
    """Relative weight of each sub-score."""
    w_skill: float = Field(ge=0.0, le=1.0)
    w_experience: float = Field(ge=0.0, le=1.0)
    w_culture: float = Field(ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_sum(self) -> SearchWeights:
        total = self.w_skill + self.w_experience + self.w_culture
        if not 0.99 <= round(total, 6) <= 1.01:
            raise ValueError(f"Weights must sum to 1 (got {total:.3f})")
        return self


class SearchRequest(BaseModel):
    """Search request."""
    query: str = Field(min_length=1, max_length=500)
    weights: SearchWeights | None = None


class ParsedQueryDTO(BaseModel):
    keywords: list[str]
    location: str | None = None
    skills: list[str] = Field(default_factory=list)


class ScoreBreakdown(BaseModel):
    skill_match: float = Field(ge=0.0, le=1.0)
    experience_relevance: float = Field(ge=0.0, le=1.0)
    cultural_fit: float = Field(ge=0.0, le=1.0)


class SearchCandidateDTO(BaseModel):
    """One ranked (and redacted) search result."""
    id: str
    name: str
    title: str
    location: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    skills: list[Any] = Field(default_factory=list)
    workExperience: Any | None = None
    education: Any | None = None
    certifications: Any | None = None
    match_score: float
    skill_match: float
    experience_relevance: float
    cultural_fit: float
    score_breakdown: ScoreBreakdown
    percentile_rank: float = Field(ge=0.0, le=100.0)
    reasoning: str
    source_url: str


class SearchResponse(BaseModel):
    """Search response."""
    candidates: list[SearchCandidateDTO] = Field(default_factory=list)
    parsedQuery: ParsedQueryDTO | None = None
    message: str | None = None


class SigninResponse(BaseModel):
    message: str
    note: str
    signInPage: str


class IngestCandidateResponse(BaseModel):
    """Ingestion response."""
    id: str
    name: str
    email: str
    skills: list[str]
    title: str
    processedTimestamp: str


class UserDataDTO(BaseModel):
    id: str
    email: str | None = None
    name: str | None = None
    role: str | None = None
    image: str | None = None
    emailVerified: str | None = None


class AuditLogExportDTO(BaseModel):
    id: int
    createdAt: str
    action: str
    details: Any | None = None
    entity: str | None = None
    entityId: str | None = None


class UserDataExportResponse(BaseModel):
    userData: UserDataDTO
    auditLogs: list[AuditLogExportDTO]


class DeletionResponse(BaseModel):
    message: str
    userId: str
