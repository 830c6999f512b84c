# flask_app/models/__init__.py
"""
Database models package
"""

from .badge import Badge, UserBadge
from .base import BaseModel, db
from .enums import BadgeType, MessageType, NotificationPriority, NotificationType, UserRole, UserStatus
from .message import Message
from .notification import Notification
from .opportunity import (
    APPLICATION_TRANSITIONS,
    ApplicationStatus,
    OpportunityStatus,
    VolunteerApplication,
    VolunteerOpportunity,
)
from .organization import Organization
from .user import User

__all__ = [
    "db",
    "BaseModel",
    "User",
    "Organization",
    # Opportunity models
    "VolunteerOpportunity",
    "VolunteerApplication",
    "OpportunityStatus",
    "ApplicationStatus",
    "APPLICATION_TRANSITIONS",
    # Messaging and notifications
    "Notification",
    "Message",
    # Badges
    "Badge",
    "UserBadge",
    # Enums
    "UserRole",
    "UserStatus",
    "NotificationType",
    "NotificationPriority",
    "MessageType",
    "BadgeType",
]
