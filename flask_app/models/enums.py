# flask_app/models/enums.py
"""
Enums shared by user, notification, message and badge models.

Roles, priorities and message types keep the integer codes used in token
claims and API payloads.
"""

from enum import Enum as PyEnum


class UserRole(PyEnum):
    """User role enumeration"""

    VOLUNTEER = 1
    ORGANIZATION = 2
    ADMINISTRATOR = 3

    @classmethod
    def parse(cls, value):
        """
        Parse a role claim given as enum name or numeric code.

        Returns None when the value does not name a role.
        """
        if isinstance(value, cls):
            return value
        if value is None or isinstance(value, bool):
            return None
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return None
        text = str(value).strip()
        if not text:
            return None
        # ASCII only; int() rejects other Unicode digits such as superscripts
        if text.isascii() and text.isdigit():
            return cls.parse(int(text))
        return cls.__members__.get(text.upper())


class UserStatus(PyEnum):
    """User account status"""

    ACTIVE = "active"
    INACTIVE = "inactive"


class NotificationType(PyEnum):
    """
    Notification type enumeration.

    APPLICATION_APPROVED and APPLICATION_REJECTED are not emitted by the status
    workflow, where only completion has a side effect (badge evaluation). They
    stay in the catalog for notifications created directly through
    ``NotificationService.create``.
    """

    WELCOME = "welcome"
    APPLICATION_SUBMITTED = "application_submitted"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
    MESSAGE_RECEIVED = "message_received"
    BADGE_EARNED = "badge_earned"
    SYSTEM_ANNOUNCEMENT = "system_announcement"
    REMINDER_UPCOMING = "reminder_upcoming"


class NotificationPriority(PyEnum):
    """Notification priority enumeration"""

    LOW = 1
    NORMAL = 2
    HIGH = 3
    URGENT = 4


class MessageType(PyEnum):
    """Direct message type enumeration"""

    TEXT = 1
    IMAGE = 2
    FILE = 3
    SYSTEM = 4
    APPLICATION_UPDATE = 5


class BadgeType(PyEnum):
    """Badge category enumeration"""

    ACTIVITY = "activity"
    TIME = "time"
    LEADERSHIP = "leadership"
    SPECIAL = "special"
