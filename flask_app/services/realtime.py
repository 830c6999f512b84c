# flask_app/services/realtime.py
"""
Real-time push of created notifications.

Notifications queued during a unit of work are published only after the
enclosing database transaction commits; a rollback discards them. The
publisher itself is pluggable and selected by REALTIME_BACKEND.
"""

import threading
from typing import Any, Dict, List

import requests
from flask import current_app, has_app_context
from sqlalchemy import event
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import Session

from config.monitoring import ServiceMonitoring

_OUTBOX_KEY = "realtime_outbox"
_PENDING_KEY = "realtime_pending"
_listeners_installed = False
_install_lock = threading.Lock()


def user_group(user_id):
    """Name of the push group every client of a user subscribes to"""
    return f"User_{user_id}"


class NotificationPublisher:
    """Base publisher; subclasses deliver one event for one user."""

    name = "base"

    def publish(self, user_id: int, payload: Dict[str, Any]) -> None:
        raise NotImplementedError


class LoggingPublisher(NotificationPublisher):
    """Writes events to the application log; the default outside production."""

    name = "log"

    def publish(self, user_id, payload):
        current_app.logger.info(
            f"Realtime notification for {user_group(user_id)}: {payload.get('type')} (id={payload.get('id')})"
        )


class MemoryPublisher(NotificationPublisher):
    """Keeps published events in memory for inspection."""

    name = "memory"

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    def publish(self, user_id, payload):
        self.events.append({"group": user_group(user_id), "user_id": user_id, "payload": payload})

    def clear(self):
        self.events.clear()


class WebhookPublisher(NotificationPublisher):
    """Posts events as JSON to the push gateway at REALTIME_WEBHOOK_URL."""

    name = "webhook"

    def __init__(self, url, timeout=3, session=None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def publish(self, user_id, payload):
        body = {"group": user_group(user_id), "event": "ReceiveNotification", "data": payload}
        response = self.session.post(self.url, json=body, timeout=self.timeout)
        response.raise_for_status()


def build_publisher(config):
    """Create the publisher named by config['REALTIME_BACKEND']"""
    backend = config.get("REALTIME_BACKEND", "log")
    if backend == "webhook":
        url = config.get("REALTIME_WEBHOOK_URL")
        if not url:
            raise ValueError("REALTIME_WEBHOOK_URL is required when REALTIME_BACKEND=webhook")
        return WebhookPublisher(url, timeout=config.get("REALTIME_WEBHOOK_TIMEOUT", 3))
    if backend == "memory":
        return MemoryPublisher()
    if backend == "log":
        return LoggingPublisher()
    raise ValueError(f"Unknown REALTIME_BACKEND '{backend}'")


def get_publisher():
    return current_app.extensions.get("realtime")


def queue_notification(session, notification):
    """Register a flushed notification for publication once the transaction commits"""
    session.info.setdefault(_OUTBOX_KEY, []).append(notification)


def _collect_payloads(session):
    if session.in_nested_transaction():
        return
    outbox = session.info.pop(_OUTBOX_KEY, [])
    if not outbox:
        return
    session.flush()
    pending = session.info.setdefault(_PENDING_KEY, [])
    for notification in outbox:
        # Notifications added inside a rolled-back savepoint are no longer persistent
        if not sa_inspect(notification).persistent:
            continue
        pending.append((notification.recipient_id, notification.to_dict()))


def _publish_pending(session):
    if session.in_nested_transaction():
        return
    pending = session.info.pop(_PENDING_KEY, [])
    if not pending or not has_app_context():
        return
    publisher = get_publisher()
    if publisher is None or not current_app.config.get("REALTIME_ENABLED", True):
        return
    for user_id, payload in pending:
        try:
            publisher.publish(user_id, payload)
            ServiceMonitoring.NOTIFICATIONS_PUBLISHED.labels(status="ok").inc()
        except Exception as e:
            ServiceMonitoring.NOTIFICATIONS_PUBLISHED.labels(status="failed").inc()
            current_app.logger.error(
                f"Failed to publish notification {payload.get('id')} to {user_group(user_id)}: {str(e)}"
            )


def _discard(session, previous_transaction):
    if previous_transaction.nested:
        return
    session.info.pop(_OUTBOX_KEY, None)
    session.info.pop(_PENDING_KEY, None)


def _install_session_listeners():
    global _listeners_installed
    with _install_lock:
        if _listeners_installed:
            return
        event.listen(Session, "before_commit", _collect_payloads)
        event.listen(Session, "after_commit", _publish_pending)
        event.listen(Session, "after_soft_rollback", _discard)
        _listeners_installed = True


def init_realtime(app, publisher=None):
    """Attach a publisher to the app and hook publication into session commits"""
    app.extensions["realtime"] = publisher or build_publisher(app.config)
    _install_session_listeners()
    return app.extensions["realtime"]
