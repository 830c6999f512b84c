# flask_app/services/message_service.py
"""
Message Service - direct messages and the conversations derived from them
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy import and_, func, or_

from config.monitoring import ServiceMonitoring
from flask_app.models import Message, MessageType, NotificationType, User, db
from flask_app.models.base import utcnow
from flask_app.services.notification_service import NotificationService
from flask_app.utils.errors import NotFound, ValidationFailed


@dataclass
class ConversationSummary:
    """Latest state of the conversation between a user and one counterpart"""

    id: str
    other_user: User
    last_message: Message
    unread_count: int

    @property
    def last_message_at(self) -> Optional[datetime]:
        return self.last_message.sent_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "otherUser": self.other_user.to_summary(),
            "lastMessage": self.last_message.to_dict(),
            "lastMessageAt": self.last_message_at.isoformat() if self.last_message_at else None,
            "unreadCount": self.unread_count,
        }


@dataclass
class ConversationList:
    conversations: List[ConversationSummary]
    total_unread: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "conversations": [c.to_dict() for c in self.conversations],
            "totalUnread": self.total_unread,
        }


def _pair_filter(user_id: int, other_user_id: int):
    return or_(
        and_(Message.sender_id == user_id, Message.recipient_id == other_user_id),
        and_(Message.sender_id == other_user_id, Message.recipient_id == user_id),
    )


class MessageService:
    """Send messages, list conversations and track per-conversation read state"""

    @classmethod
    def conversation_id(cls, user_id: int, other_user_id: int) -> str:
        return Message.conversation_id_for(user_id, other_user_id)

    @classmethod
    def resolve_counterpart(cls, conversation_id: str, user_id: int) -> int:
        """
        Return the other participant of ``conversation_id`` for ``user_id``.

        Malformed ids raise ValidationFailed; ids the user is not part of are
        reported as not found.
        """
        parts = (conversation_id or "").split("_")
        if len(parts) != 2 or not all(p.isascii() and p.isdigit() for p in parts):
            raise ValidationFailed("Invalid conversation id")
        low, high = int(parts[0]), int(parts[1])
        # Only the canonical "low_high" spelling names a conversation
        if low >= high or conversation_id != Message.conversation_id_for(low, high):
            raise ValidationFailed("Invalid conversation id")
        if user_id not in (low, high):
            raise NotFound("Conversation not found")
        return high if user_id == low else low

    @classmethod
    def send(
        cls,
        sender_id: int,
        recipient_id: int,
        content: str,
        type: MessageType = MessageType.TEXT,
    ) -> Message:
        """Persist an unread message and notify the recipient in the same transaction"""
        if sender_id == recipient_id:
            raise ValidationFailed("You cannot send a message to yourself")

        content = (content or "").strip()
        max_length = current_app.config.get("MESSAGE_MAX_LENGTH", 2000)
        if not content:
            raise ValidationFailed("Message content is required", errors=[{"field": "content", "error": "required"}])
        if len(content) > max_length:
            raise ValidationFailed(
                f"Message content must be {max_length} characters or less",
                errors=[{"field": "content", "error": "too_long"}],
            )

        recipient = db.session.get(User, recipient_id)
        if recipient is None or not recipient.is_active:
            raise NotFound("Recipient not found")
        sender = db.session.get(User, sender_id)
        if sender is None:
            raise NotFound("Sender not found")

        message = Message(
            sender_id=sender_id,
            recipient_id=recipient_id,
            content=content,
            type=type,
            sent_at=utcnow(),
            is_read=False,
        )
        db.session.add(message)
        db.session.flush()

        NotificationService.create(
            recipient_id=recipient_id,
            sender_id=sender_id,
            title="New message",
            message=f"{sender.full_name} sent you a message",
            type=NotificationType.MESSAGE_RECEIVED,
            action_url=f"/messages/{message.conversation_id}",
            commit=False,
        )
        db.session.commit()

        ServiceMonitoring.MESSAGES_SENT.labels(type=type.name.lower()).inc()
        current_app.logger.info(f"Message {message.id} sent from user {sender_id} to user {recipient_id}")
        return message

    @classmethod
    def _unread_by_sender(cls, user_id: int) -> Dict[int, int]:
        rows = (
            db.session.query(Message.sender_id, func.count(Message.id))
            .filter(Message.recipient_id == user_id, Message.is_read.is_(False))
            .group_by(Message.sender_id)
            .all()
        )
        return {sender_id: count for sender_id, count in rows}

    @classmethod
    def list_conversations(cls, user_id: int) -> ConversationList:
        """One summary per counterpart, most recently active first"""
        messages = (
            Message.query.filter(or_(Message.sender_id == user_id, Message.recipient_id == user_id))
            .order_by(Message.sent_at.desc(), Message.id.desc())
            .all()
        )

        latest: Dict[int, Message] = {}
        for message in messages:
            other_id = message.recipient_id if message.sender_id == user_id else message.sender_id
            # Ordered newest first, so the first message seen per counterpart is the latest
            latest.setdefault(other_id, message)

        if not latest:
            return ConversationList(conversations=[], total_unread=0)

        unread = cls._unread_by_sender(user_id)
        users = {u.id: u for u in User.query.filter(User.id.in_(list(latest))).all()}

        conversations = [
            ConversationSummary(
                id=cls.conversation_id(user_id, other_id),
                other_user=users[other_id],
                last_message=message,
                unread_count=unread.get(other_id, 0),
            )
            for other_id, message in latest.items()
            if other_id in users
        ]
        return ConversationList(
            conversations=conversations,
            total_unread=sum(c.unread_count for c in conversations),
        )

    @classmethod
    def get_conversation(cls, user_id: int, other_user_id: int) -> Tuple[User, List[Message]]:
        """All messages between the pair, oldest first"""
        other_user = db.session.get(User, other_user_id)
        if other_user is None or other_user_id == user_id:
            raise NotFound("Conversation not found")

        messages = (
            Message.query.filter(_pair_filter(user_id, other_user_id))
            .order_by(Message.sent_at.asc(), Message.id.asc())
            .all()
        )
        return other_user, messages

    @classmethod
    def mark_conversation_read(cls, user_id: int, other_user_id: int) -> int:
        """Mark every unread message sent to ``user_id`` by the counterpart read"""
        changed = Message.query.filter(
            Message.sender_id == other_user_id,
            Message.recipient_id == user_id,
            Message.is_read.is_(False),
        ).update(
            {Message.is_read: True, Message.read_at: utcnow()},
            synchronize_session=False,
        )
        db.session.commit()
        if changed:
            current_app.logger.debug(
                f"User {user_id} read {changed} messages in conversation "
                f"{cls.conversation_id(user_id, other_user_id)}"
            )
        return changed

    @classmethod
    def conversation_stats(cls, user_id: int) -> Dict[str, Any]:
        listing = cls.list_conversations(user_id)
        last_activity = listing.conversations[0].last_message_at if listing.conversations else None
        return {
            "totalConversations": len(listing.conversations),
            "unreadConversations": sum(1 for c in listing.conversations if c.unread_count > 0),
            "totalUnreadMessages": listing.total_unread,
            "lastActivity": last_activity.isoformat() if last_activity else None,
        }
