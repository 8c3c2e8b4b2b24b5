"""
Admin API Endpoints.

Audit trail access for dashboard administrators.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from bus_backend.app.db.session import get_db
from bus_backend.app.schemas.admin import AuditTrailResponse, AuditLogResponse
from bus_backend.app.core.guards import require_admin
from bus_backend.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Max number of logs to return"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail (admin-only).

    Most recent entries first; logins, deletions, route creation,
    announcements and trip status changes are recorded.
    """
    logs = await get_audit_trail(db=db, action=action, limit=limit)

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
