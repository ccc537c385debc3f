# config/monitoring.py

import os

from prometheus_client import Counter, Histogram


class MonitoringConfig:
    """Monitoring and logging configuration"""

    MONITORING_ENABLED = os.environ.get("MONITORING_ENABLED", "false").lower() == "true"
    METRICS_ENDPOINT = os.environ.get("METRICS_ENDPOINT", "/metrics")
    HEALTH_CHECK_ENDPOINT = os.environ.get("HEALTH_CHECK_ENDPOINT", "/health")

    # Logging Configuration
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FORMAT = os.environ.get("LOG_FORMAT", "json")  # 'json' or 'text'
    LOG_DIR = os.environ.get("LOG_DIR", "logs")
    LOG_FILE_MAX_BYTES = int(os.environ.get("LOG_FILE_MAX_BYTES", 10485760))  # 10MB
    LOG_FILE_BACKUP_COUNT = int(os.environ.get("LOG_FILE_BACKUP_COUNT", 10))

    ENABLE_FILE_LOGGING = os.environ.get("ENABLE_FILE_LOGGING", "true").lower() == "true"
    ENABLE_CONSOLE_LOGGING = os.environ.get("ENABLE_CONSOLE_LOGGING", "true").lower() == "true"

    APP_NAME = os.environ.get("APP_NAME", "identity-reconciliation")
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


def get_monitoring_config_class(flask_env):
    return {
        "production": ProductionMonitoringConfig,
        "testing": TestingMonitoringConfig,
    }.get(flask_env, DevelopmentMonitoringConfig)


class IdentifyMonitoring:
    """Prometheus metric helpers for the identify endpoint."""

    OUTCOMES = ("created_primary", "created_secondary", "merged", "unchanged", "invalid", "error")

    IDENTIFY_COUNTER = Counter(
        "identify_requests_total",
        "Total identify requests by resolution outcome.",
        labelnames=("outcome",),
    )
    IDENTIFY_LATENCY = Histogram(
        "identify_request_seconds",
        "Latency histogram for the identify endpoint.",
        labelnames=("outcome",),
        buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2, 5),
    )
    DEMOTIONS_COUNTER = Counter(
        "identify_primary_demotions_total",
        "Primary contacts demoted to secondary while merging clusters.",
    )

    @classmethod
    def record_identify(cls, *, duration_seconds: float, outcome: str):
        cls.IDENTIFY_COUNTER.labels(outcome=outcome).inc()
        cls.IDENTIFY_LATENCY.labels(outcome=outcome).observe(max(duration_seconds, 0.0))

    @classmethod
    def record_merge(cls, *, demoted_count: int):
        if demoted_count > 0:
            cls.DEMOTIONS_COUNTER.inc(demoted_count)
