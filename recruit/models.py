"""Core SQLAlchemy models (2.x style) for the recruiting analytics schema.

Resume-derived candidate attributes live in JSON columns exactly as the
ingestion process wrote them; the analytics pipelines normalize them on read.
Timestamps are stored as naive UTC.
"""

from __future__ import annotations

import enum
import re
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

CUID_PATTERN = re.compile(r"^c[a-z0-9]{24}$")


def new_cuid() -> str:
    """Generate a CUID-shaped identifier (25 chars, leading ``c``)."""
    return "c" + uuid.uuid4().hex[:24]


def is_cuid(value: str) -> bool:
    return bool(CUID_PATTERN.match(value or ""))


def utcnow() -> datetime:
    """Current time as naive UTC, matching what the columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime) -> datetime:
    """Convert any aware datetime (incl. pendulum) to a plain naive UTC datetime."""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return datetime(
        value.year, value.month, value.day,
        value.hour, value.minute, value.second, value.microsecond,
    )


class Role(str, enum.Enum):
    """Application roles."""
    ADMIN = "ADMIN"
    RECRUITER = "RECRUITER"
    USER = "USER"


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class User(Base):
    """Application users (recruiters, admins)."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_cuid)
    email: Mapped[str | None] = mapped_column(String(255), unique=True)
    name: Mapped[str | None] = mapped_column(String(255))
    role: Mapped[Role] = mapped_column(Enum(Role, name="role"), default=Role.USER, nullable=False)
    image: Mapped[str | None] = mapped_column(String(1024))
    email_verified: Mapped[datetime | None] = mapped_column()
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)

    audit_logs: Mapped[list[AuditLog]] = relationship("AuditLog", back_populates="user")


class Candidate(Base):
    """Candidates table."""
    __tablename__ = "candidates"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_cuid)
    name: Mapped[str | None] = mapped_column(String(255), index=True)
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    # phone, address and resume_text hold Fernet tokens (recruit.encryption)
    phone: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    title: Mapped[str | None] = mapped_column(String(255))
    location: Mapped[str | None] = mapped_column(String(255), index=True)
    skills: Mapped[list | dict | None] = mapped_column(JSON)
    work_experience: Mapped[list | None] = mapped_column(JSON)
    education: Mapped[list | None] = mapped_column(JSON)
    certifications: Mapped[list | None] = mapped_column(JSON)
    resume_text: Mapped[str | None] = mapped_column(Text)
    source_url: Mapped[str | None] = mapped_column(String(1024))
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    outreaches: Mapped[list[EmailOutreach]] = relationship("EmailOutreach", back_populates="candidate")

    __table_args__ = (
        Index("ix_candidates_created_at", "created_at"),
    )


class EmailOutreach(Base):
    """Outbound emails and their delivery/engagement timestamps."""
    __tablename__ = "email_outreach"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_cuid)
    candidate_id: Mapped[str | None] = mapped_column(
        ForeignKey("candidates.id", ondelete="SET NULL"),
        index=True,
    )
    recipient_email: Mapped[str] = mapped_column(String(255), nullable=False)
    subject: Mapped[str | None] = mapped_column(String(500))
    resend_message_id: Mapped[str | None] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="queued")
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    sent_at: Mapped[datetime | None] = mapped_column()
    delivered_at: Mapped[datetime | None] = mapped_column()
    opened_at: Mapped[datetime | None] = mapped_column()
    clicked_at: Mapped[datetime | None] = mapped_column()

    candidate: Mapped[Candidate | None] = relationship("Candidate", back_populates="outreaches")

    __table_args__ = (
        Index("ix_email_outreach_created_at", "created_at"),
        Index("ix_email_outreach_sent_at", "sent_at"),
    )


class AuditLog(Base):
    """Append-only audit trail of user actions."""
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(default=utcnow, nullable=False)
    user_id: Mapped[str | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    entity: Mapped[str | None] = mapped_column(String(100))
    entity_id: Mapped[str | None] = mapped_column(String(64))
    details: Mapped[dict | None] = mapped_column(JSON)

    user: Mapped[User | None] = relationship("User", back_populates="audit_logs")

    __table_args__ = (
        Index("ix_audit_logs_user_created", "user_id", "created_at"),
    )
