"""
Audit Log Database Model.

Tracks logins and fleet-changing admin/driver actions.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from bus_backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking security events and fleet changes.

    Events logged:
    - LOGIN_SUCCESS / LOGIN_FAILED / LOGOUT
    - ROUTE_CREATED / ROUTE_DELETED
    - BUS_DELETED / DRIVER_DELETED
    - ANNOUNCEMENT_CREATED
    - TRIP_STATUS_CHANGED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for anonymous/system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_role = Column(String(20), nullable=True)
    actor_identifier = Column(String(255), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_role}:{self.actor_id})>"
