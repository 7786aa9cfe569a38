"""Audit-log persistence."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import models

logger = logging.getLogger(__name__)


async def create_audit_log(
    session: AsyncSession,
    action: str,
    *,
    user_id: str | None = None,
    entity: str | None = None,
    entity_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> models.AuditLog | None:
    """Persist and commit an audit entry.

    Audit logging is non-critical: a database failure is logged, the session
    rolled back, and None returned so the calling request can continue.
    """
    entry = models.AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=entity_id,
        details=details,
    )
    try:
        session.add(entry)
        await session.commit()
    except SQLAlchemyError as e:
        logger.error(f"Failed to create audit log {action}: {e}", exc_info=True)
        await session.rollback()
        return None

    logger.debug(f"Audit log created: {action} (user={user_id})")
    return entry
