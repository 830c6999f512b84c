# flask_app/models/message.py

from sqlalchemy import Enum, Index

from .base import BaseModel, db, utcnow
from .enums import MessageType


class Message(BaseModel):
    """Direct message between two users.

    Conversations are not stored; they are the set of messages exchanged by an
    unordered pair of users, identified by ``conversation_id_for``.
    """

    __tablename__ = "messages"

    id = db.Column(db.Integer, primary_key=True)
    sender_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    recipient_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    type = db.Column(Enum(MessageType, name="message_type_enum"), default=MessageType.TEXT, nullable=False)
    sent_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    is_read = db.Column(db.Boolean, default=False, nullable=False)
    read_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Relationships
    sender = db.relationship("User", foreign_keys=[sender_id])
    recipient = db.relationship("User", foreign_keys=[recipient_id])

    __table_args__ = (
        Index("idx_message_pair", "sender_id", "recipient_id"),
        Index("idx_message_recipient_read", "recipient_id", "is_read"),
    )

    def __repr__(self):
        return f"<Message {self.id} {self.sender_id}->{self.recipient_id}>"

    @staticmethod
    def conversation_id_for(user_a, user_b):
        """Stable id for the unordered pair, the same for both participants."""
        low, high = sorted((int(user_a), int(user_b)))
        return f"{low}_{high}"

    @property
    def conversation_id(self):
        return Message.conversation_id_for(self.sender_id, self.recipient_id)

    def to_dict(self):
        return {
            "id": self.id,
            "conversationId": self.conversation_id,
            "senderId": self.sender_id,
            "recipientId": self.recipient_id,
            "content": self.content,
            "type": self.type.name.lower(),
            "isRead": self.is_read,
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
            "readAt": self.read_at.isoformat() if self.read_at else None,
        }
