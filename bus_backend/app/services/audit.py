"""
Audit logging service for tracking logins and fleet changes.

Provides centralized logging for compliance and security monitoring.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from bus_backend.app.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    DRIVER_REGISTERED = "DRIVER_REGISTERED"

    # Fleet management
    ROUTE_CREATED = "ROUTE_CREATED"
    ROUTE_CREATE_ROLLED_BACK = "ROUTE_CREATE_ROLLED_BACK"
    ROUTE_DELETED = "ROUTE_DELETED"
    BUS_DELETED = "BUS_DELETED"
    DRIVER_DELETED = "DRIVER_DELETED"

    # Operations
    TRIP_STATUS_CHANGED = "TRIP_STATUS_CHANGED"
    TRIPS_GENERATED = "TRIPS_GENERATED"
    ANNOUNCEMENT_CREATED = "ANNOUNCEMENT_CREATED"


def actor_fields(principal: Optional[dict]) -> Dict[str, Any]:
    """Extract actor columns from a decoded token payload."""
    if not principal:
        return {"actor_id": None, "actor_role": None, "actor_identifier": None}
    role = principal.get("role")
    return {
        "actor_id": principal.get(f"{role}_id"),
        "actor_role": role,
        "actor_identifier": principal.get("sub"),
    }


async def log_event(
    db: AsyncSession,
    action: str,
    principal: Optional[dict] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Log a security or fleet event to the audit log.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        principal: Decoded token payload of the actor, if any
        metadata: Additional context as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        action=action,
        meta_data=metadata,
        **actor_fields(principal),
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    logger.info("audit %s by %s", action, audit_log.actor_identifier or "anonymous")
    return audit_log


async def log_auth_event(
    db: AsyncSession,
    action: str,
    role: str,
    principal_id: Optional[int],
    identifier: Optional[str],
    metadata: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Log an authentication event (login success/failure).

    Args:
        db: Database session
        action: AuditAction.LOGIN_SUCCESS or AuditAction.LOGIN_FAILED
        role: "admin" or "driver"
        principal_id: ID of the admin/driver attempting login (None if unknown)
        identifier: Email or phone number used
        metadata: Additional context (e.g., failure reason)
    """
    audit_log = AuditLog(
        action=action,
        actor_id=principal_id,
        actor_role=role,
        actor_identifier=identifier,
        meta_data=metadata,
    )
    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)
    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering, most recent first.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
