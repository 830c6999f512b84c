# flask_app/routes/__init__.py
"""
Application routes package
"""

from .badge import register_badge_routes
from .main import register_main_routes
from .message import register_message_routes
from .notification import register_notification_routes
from .voluntariado import register_voluntariado_routes


def init_routes(app):
    """Initialize all application routes"""
    register_main_routes(app)
    register_notification_routes(app)
    register_message_routes(app)
    register_voluntariado_routes(app)
    register_badge_routes(app)
