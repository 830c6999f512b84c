# flask_app/models/opportunity/enums.py
"""
Enums for opportunity and application models.
"""

from enum import Enum as PyEnum


class OpportunityStatus(PyEnum):
    """Opportunity lifecycle status"""

    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    CLOSED = "closed"
    COMPLETED = "completed"


class ApplicationStatus(PyEnum):
    """Volunteer application status"""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value):
        """Parse a status by value or name, case-insensitive. Returns None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        text = value.strip().lower()
        for member in cls:
            if member.value == text:
                return member
        return None


# Allowed status changes; a COMPLETED -> COMPLETED update re-runs badge evaluation
APPLICATION_TRANSITIONS = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.PENDING,
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.COMPLETED,
    },
    ApplicationStatus.APPROVED: {
        ApplicationStatus.APPROVED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.COMPLETED,
    },
    ApplicationStatus.REJECTED: set(),
    ApplicationStatus.COMPLETED: {ApplicationStatus.COMPLETED},
}
