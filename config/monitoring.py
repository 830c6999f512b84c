# config/monitoring.py

import os

from prometheus_client import Counter


class MonitoringConfig:
    """Monitoring and logging configuration"""

    # Monitoring Configuration
    MONITORING_ENABLED = os.environ.get("MONITORING_ENABLED", "false").lower() == "true"
    METRICS_ENDPOINT = os.environ.get("METRICS_ENDPOINT", "/metrics")
    HEALTH_CHECK_ENDPOINT = os.environ.get("HEALTH_CHECK_ENDPOINT", "/health")

    # Logging Configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")  # 'json' or 'text'
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_FILE_MAX_BYTES = int(os.environ.get("LOG_FILE_MAX_BYTES", 10485760))  # 10MB
    LOG_FILE_BACKUP_COUNT = int(os.environ.get("LOG_FILE_BACKUP_COUNT", 10))

    # Console and File Logging
    ENABLE_FILE_LOGGING = os.environ.get("ENABLE_FILE_LOGGING", "true").lower() == "true"
    ENABLE_CONSOLE_LOGGING = os.environ.get("ENABLE_CONSOLE_LOGGING", "true").lower() == "true"

    # Application Info
    APP_NAME = os.environ.get("APP_NAME", "Voluntariado API")
    APP_VERSION = os.environ.get("APP_VERSION", "1.0.0")


class DevelopmentMonitoringConfig(MonitoringConfig):
    """Development-specific monitoring configuration"""

    LOG_LEVEL = "DEBUG"
    LOG_FORMAT = "text"  # More readable in development
    ENABLE_FILE_LOGGING = True
    ENABLE_CONSOLE_LOGGING = True


class ProductionMonitoringConfig(MonitoringConfig):
    """Production-specific monitoring configuration"""

    LOG_LEVEL = "INFO"
    LOG_FORMAT = "json"  # Structured logging for production
    ENABLE_FILE_LOGGING = True
    ENABLE_CONSOLE_LOGGING = False  # Usually handled by container orchestration


class TestingMonitoringConfig(MonitoringConfig):
    """Testing-specific monitoring configuration"""

    MONITORING_ENABLED = False
    LOG_LEVEL = "WARNING"
    LOG_FORMAT = "text"
    ENABLE_FILE_LOGGING = False
    ENABLE_CONSOLE_LOGGING = False


class ServiceMonitoring:
    """Prometheus counters for the notification, messaging and badge services."""

    NOTIFICATIONS_CREATED = Counter(
        "voluntariado_notifications_created_total",
        "Notifications persisted, by notification type.",
        labelnames=("type",),
    )
    NOTIFICATIONS_PUBLISHED = Counter(
        "voluntariado_notifications_published_total",
        "Real-time notification events handed to the publisher.",
        labelnames=("status",),
    )
    MESSAGES_SENT = Counter(
        "voluntariado_messages_sent_total",
        "Direct messages sent, by message type.",
        labelnames=("type",),
    )
    BADGES_AWARDED = Counter(
        "voluntariado_badges_awarded_total",
        "Badges awarded to users, by how they were awarded.",
        labelnames=("source",),
    )
    APPLICATION_STATUS_CHANGES = Counter(
        "voluntariado_application_status_changes_total",
        "Application status transitions, by target status.",
        labelnames=("status",),
    )
    AUTHORIZATION_DENIALS = Counter(
        "voluntariado_authorization_denials_total",
        "Requests rejected by the role filter, by reason.",
        labelnames=("reason",),
    )
