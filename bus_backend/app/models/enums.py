"""
Enumerations shared by models, schemas and guards.
"""

import enum


class UserRole(str, enum.Enum):
    """
    Principal role enumeration.

    Roles:
        ADMIN: Manages fleet data and broadcasts announcements
        DRIVER: Operates trips and reports bus locations
    """
    ADMIN = "admin"
    DRIVER = "driver"


class TripStatus(str, enum.Enum):
    """
    Well-known trip statuses.

    Trip.status is a free-form string column; these are the values the
    start/pause/resume/complete verbs write. Any other string is accepted
    through the generic status update.
    """
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    PAUSED = "Paused"
    COMPLETED = "Completed"


class ReportStatus(str, enum.Enum):
    """Passenger report workflow values (not enforced)."""
    NEW = "New"
    IN_REVIEW = "In Review"
    RESOLVED = "Resolved"
