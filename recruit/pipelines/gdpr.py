"""GDPR self-service: export and erase a user's own data."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import pendulum
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from recruit import models
from recruit.audit import create_audit_log

logger = logging.getLogger(__name__)

EXPORT_ACTION = "USER_DATA_EXPORT_REQUEST"
DELETE_ACTION = "USER_DATA_DELETION_REQUEST"
DELETION_MESSAGE = "User data deletion process initiated successfully."


class GdprError(Exception):
    """Raised when an export or deletion fails."""

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


def _iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return pendulum.instance(value, tz="UTC").to_iso8601_string()


async def _get_user(session: AsyncSession, user_id: str) -> models.User | None:
    result = await session.execute(select(models.User).where(models.User.id == user_id))
    return result.scalar_one_or_none()


async def export_user_data(session: AsyncSession, user_id: str) -> dict[str, Any] | None:
    """Everything stored about ``user_id``; None when the user does not exist.

    The export request is itself audited before the data is read, so it
    appears in the returned ``auditLogs``.
    """
    try:
        user = await _get_user(session, user_id)
        if user is None:
            return None

        await create_audit_log(
            session,
            EXPORT_ACTION,
            user_id=user_id,
            entity="User",
            entity_id=user_id,
            details={"targetUserId": user_id, "actionType": EXPORT_ACTION},
        )

        result = await session.execute(
            select(models.AuditLog)
            .where(models.AuditLog.user_id == user_id)
            .order_by(models.AuditLog.created_at.desc(), models.AuditLog.id.desc())
        )
        audit_logs = result.scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Error during data export for user {user_id}: {e}", exc_info=True)
        raise GdprError(
            "An error occurred while processing your data export request.", str(e)
        ) from e

    logger.info(f"Exported data for user {user_id} ({len(audit_logs)} audit entries)")
    return {
        "userData": {
            "id": user.id,
            "email": user.email,
            "name": user.name,
            "role": user.role.value if user.role else None,
            "image": user.image,
            "emailVerified": _iso(user.email_verified),
        },
        "auditLogs": [
            {
                "id": log.id,
                "createdAt": _iso(log.created_at),
                "action": log.action,
                "details": log.details,
                "entity": log.entity,
                "entityId": log.entity_id,
            }
            for log in audit_logs
        ],
    }


async def delete_user_data(session: AsyncSession, user_id: str) -> dict[str, str] | None:
    """Delete ``user_id`` and detach its audit trail; None when the user does not exist."""
    try:
        if await _get_user(session, user_id) is None:
            return None
    except SQLAlchemyError as e:
        logger.error(f"Error looking up user {user_id} for deletion: {e}", exc_info=True)
        raise GdprError(
            "An error occurred while processing your data deletion request.", str(e)
        ) from e

    await create_audit_log(
        session,
        DELETE_ACTION,
        user_id=user_id,
        entity="User",
        entity_id=user_id,
        details={"targetUserId": user_id, "actionType": DELETE_ACTION},
    )

    try:
        # Audit rows are kept but anonymized before the user row goes away
        await session.execute(
            update(models.AuditLog)
            .where(models.AuditLog.user_id == user_id)
            .values(user_id=None)
        )
        await session.execute(delete(models.User).where(models.User.id == user_id))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error during data deletion for user {user_id}: {e}", exc_info=True)
        raise GdprError(
            "An error occurred while processing your data deletion request.", str(e)
        ) from e

    logger.info(f"Deleted user {user_id}")
    return {"message": DELETION_MESSAGE, "userId": user_id}
