# flask_app/routes/notification.py

"""
Notification API routes
"""

from flask import current_app
from flask_login import current_user, login_required

from flask_app.services.notification_service import NotificationService
from flask_app.utils.api import api_response, query_int


def register_notification_routes(app):
    """Register notification routes"""

    @app.route("/api/notification", methods=["GET"])
    @login_required
    def api_list_notifications():
        """Paginated notifications for the caller, newest first, with unread count"""
        page = query_int("page", 1)
        page_size = query_int(
            "pageSize",
            current_app.config.get("NOTIFICATIONS_PAGE_SIZE", 20),
            maximum=current_app.config.get("NOTIFICATIONS_MAX_PAGE_SIZE", 100),
        )
        result = NotificationService.list_for_user(current_user.id, page=page, page_size=page_size)
        return api_response(result.to_dict())

    @app.route("/api/notification/unread-count", methods=["GET"])
    @login_required
    def api_unread_notification_count():
        return api_response(NotificationService.unread_count(current_user.id))

    @app.route("/api/notification/<int:notification_id>/read", methods=["PUT"])
    @login_required
    def api_mark_notification_read(notification_id):
        NotificationService.mark_read(notification_id, current_user.id)
        return api_response(message="Notification marked as read")

    @app.route("/api/notification/read-all", methods=["PUT"])
    @login_required
    def api_mark_all_notifications_read():
        changed = NotificationService.mark_all_read(current_user.id)
        return api_response({"updated": changed}, message="All notifications marked as read")
