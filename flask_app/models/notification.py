# flask_app/models/notification.py

from sqlalchemy import Enum, Index

from .base import BaseModel, db, utcnow
from .enums import NotificationPriority, NotificationType


class Notification(BaseModel):
    """In-app notification for a single recipient"""

    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    type = db.Column(Enum(NotificationType, name="notification_type_enum"), nullable=False)
    priority = db.Column(
        Enum(NotificationPriority, name="notification_priority_enum"),
        default=NotificationPriority.NORMAL,
        nullable=False,
    )
    action_url = db.Column(db.String(500), nullable=True)
    # Only ever flipped False -> True
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Relationships
    recipient = db.relationship("User", foreign_keys=[recipient_id])
    sender = db.relationship("User", foreign_keys=[sender_id])

    __table_args__ = (Index("idx_notification_recipient_read", "recipient_id", "is_read"),)

    def __repr__(self):
        return f"<Notification {self.id} to={self.recipient_id} ({self.type.value})>"

    def mark_read(self):
        """Flip to read; returns True when the state changed."""
        if self.is_read:
            return False
        self.is_read = True
        self.read_at = utcnow()
        return True

    def to_dict(self):
        return {
            "id": self.id,
            "recipientId": self.recipient_id,
            "senderId": self.sender_id,
            "title": self.title,
            "message": self.message,
            "type": self.type.value,
            "priority": self.priority.name.lower(),
            "actionUrl": self.action_url,
            "isRead": self.is_read,
            "readAt": self.read_at.isoformat() if self.read_at else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
