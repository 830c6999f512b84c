# flask_app/services/notification_service.py
"""
Notification Service - per-recipient notifications with read-state tracking
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from flask import current_app

from config.monitoring import ServiceMonitoring
from flask_app.models import Notification, NotificationPriority, NotificationType, User, db
from flask_app.models.base import utcnow
from flask_app.services.realtime import queue_notification
from flask_app.utils.errors import NotFound


@dataclass
class NotificationPage:
    """One page of a user's notifications plus their unread total"""

    items: List[Notification]
    total_count: int
    unread_count: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total_count + self.page_size - 1) // self.page_size

    def to_dict(self) -> Dict[str, Any]:
        return {
            "notifications": [n.to_dict() for n in self.items],
            "totalCount": self.total_count,
            "unreadCount": self.unread_count,
            "page": self.page,
            "pageSize": self.page_size,
            "totalPages": self.total_pages,
        }


class NotificationService:
    """Create, list and mark notifications read"""

    @classmethod
    def create(
        cls,
        recipient_id: int,
        title: str,
        message: str,
        type: NotificationType,
        priority: NotificationPriority = NotificationPriority.NORMAL,
        sender_id: Optional[int] = None,
        action_url: Optional[str] = None,
        commit: bool = True,
    ) -> Notification:
        """
        Persist a new unread notification and queue it for real-time push.

        With ``commit=False`` the notification joins the caller's unit of work
        and is pushed only when that transaction commits.
        """
        if db.session.get(User, recipient_id) is None:
            raise NotFound(f"Recipient {recipient_id} not found")

        notification = Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            title=title,
            message=message,
            type=type,
            priority=priority,
            action_url=action_url,
            is_read=False,
        )
        db.session.add(notification)
        db.session.flush()
        queue_notification(db.session(), notification)

        ServiceMonitoring.NOTIFICATIONS_CREATED.labels(type=type.value).inc()
        current_app.logger.info(
            f"Notification {notification.id} ({type.value}) created for user {recipient_id}"
        )

        if commit:
            db.session.commit()
        return notification

    @classmethod
    def list_for_user(cls, user_id: int, page: int = 1, page_size: Optional[int] = None) -> NotificationPage:
        """Newest first; ties broken by id so pages are stable"""
        if page_size is None:
            page_size = current_app.config.get("NOTIFICATIONS_PAGE_SIZE", 20)
        page = max(1, page)

        query = Notification.query.filter_by(recipient_id=user_id)
        total = query.count()
        items = (
            query.order_by(Notification.created_at.desc(), Notification.id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
            .all()
        )
        return NotificationPage(
            items=items,
            total_count=total,
            unread_count=cls.unread_count(user_id),
            page=page,
            page_size=page_size,
        )

    @classmethod
    def unread_count(cls, user_id: int) -> int:
        return Notification.query.filter_by(recipient_id=user_id, is_read=False).count()

    @classmethod
    def mark_read(cls, notification_id: int, user_id: int) -> Notification:
        """
        Mark one notification read on behalf of its recipient.

        Another user's notification is reported as not found. Marking an
        already-read notification is a no-op.
        """
        notification = Notification.query.filter_by(id=notification_id, recipient_id=user_id).first()
        if notification is None:
            raise NotFound("Notification not found")

        if notification.mark_read():
            db.session.commit()
            current_app.logger.debug(f"Notification {notification_id} marked read by user {user_id}")
        return notification

    @classmethod
    def mark_all_read(cls, user_id: int) -> int:
        """Mark every unread notification of the user read; returns how many changed"""
        changed = Notification.query.filter_by(recipient_id=user_id, is_read=False).update(
            {Notification.is_read: True, Notification.read_at: utcnow()},
            synchronize_session=False,
        )
        db.session.commit()
        if changed:
            current_app.logger.info(f"Marked {changed} notifications read for user {user_id}")
        return changed
