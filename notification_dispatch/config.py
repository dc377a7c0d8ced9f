"""Environment-variable configuration.

Settings are read once, at process start, by the composition root. Whether
a queue endpoint is configured here decides for the whole process lifetime
whether dispatch queues or delivers directly.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from dotenv import load_dotenv
import structlog

logger = structlog.get_logger()

QUEUE_BACKENDS = ("sqs", "kafka")


@dataclass(frozen=True)
class Settings:
    app_env: str = "development"
    log_level: str = "INFO"
    service_name: str = "Notifier"

    queue_backend: str = "sqs"
    sqs_queue_url: str | None = None
    aws_region: str = "us-east-1"
    sqs_wait_time_seconds: int = 20
    sqs_visibility_timeout: int = 60
    kafka_bootstrap_servers: tuple[str, ...] = ()
    kafka_topic: str = "notifications.dispatch"
    kafka_group_id: str = "notifications-dispatch-worker"
    kafka_dlq_enabled: bool = True

    bulk_max_notifications: int = 100
    dispatch_max_workers: int = 10

    resend_api_key: str | None = None
    email_from: str = "Notifier <noreply@example.com>"
    email_reply_to: str | None = None

    twilio_account_sid: str | None = None
    twilio_auth_token: str | None = None
    twilio_from_number: str | None = None
    twilio_messaging_service_sid: str | None = None

    firebase_project_id: str | None = None
    firebase_private_key: str | None = None
    firebase_client_email: str | None = None

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def queue_enabled(self) -> bool:
        if self.queue_backend == "kafka":
            return bool(self.kafka_bootstrap_servers)
        return bool(self.sqs_queue_url)

    @property
    def default_subject(self) -> str:
        return f"{self.service_name} Notification"

    @property
    def default_push_title(self) -> str:
        return self.service_name


def load_settings(env_file: str | Path | None = None) -> Settings:
    """Build settings from the environment, after loading an optional `.env`.

    Values already present in the real environment win over the file.
    """
    if env_file is not None and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    queue_backend = os.getenv("QUEUE_BACKEND", "sqs").strip().lower()
    if queue_backend not in QUEUE_BACKENDS:
        raise RuntimeError(f"QUEUE_BACKEND must be one of {QUEUE_BACKENDS}, got {queue_backend!r}")

    private_key = _optional_env("FIREBASE_PRIVATE_KEY")
    if private_key is not None:
        private_key = private_key.replace("\\n", "\n")

    return Settings(
        app_env=os.getenv("APP_ENV", "development").strip().lower(),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper(),
        service_name=os.getenv("SERVICE_NAME", "Notifier").strip(),
        queue_backend=queue_backend,
        sqs_queue_url=_optional_env("SQS_QUEUE_URL"),
        aws_region=os.getenv("AWS_REGION", "us-east-1").strip(),
        sqs_wait_time_seconds=_env_int("SQS_WAIT_TIME_SECONDS", 20),
        sqs_visibility_timeout=_env_int("SQS_VISIBILITY_TIMEOUT", 60),
        kafka_bootstrap_servers=_env_csv("KAFKA_BOOTSTRAP_SERVERS"),
        kafka_topic=os.getenv("KAFKA_TOPIC_NOTIFICATIONS", "notifications.dispatch").strip(),
        kafka_group_id=os.getenv("KAFKA_GROUP_ID", "notifications-dispatch-worker").strip(),
        kafka_dlq_enabled=_env_bool("KAFKA_DLQ_ENABLED", default=True),
        bulk_max_notifications=_env_int("BULK_MAX_NOTIFICATIONS", 100),
        dispatch_max_workers=_env_int("DISPATCH_MAX_WORKERS", 10),
        resend_api_key=_optional_env("RESEND_API_KEY"),
        email_from=os.getenv("EMAIL_FROM", "Notifier <noreply@example.com>").strip(),
        email_reply_to=_optional_env("EMAIL_REPLY_TO"),
        twilio_account_sid=_optional_env("TWILIO_ACCOUNT_SID"),
        twilio_auth_token=_optional_env("TWILIO_AUTH_TOKEN"),
        twilio_from_number=_optional_env("TWILIO_PHONE_NUMBER"),
        twilio_messaging_service_sid=_optional_env("TWILIO_MESSAGING_SERVICE_SID"),
        firebase_project_id=_optional_env("FIREBASE_PROJECT_ID"),
        firebase_private_key=private_key,
        firebase_client_email=_optional_env("FIREBASE_CLIENT_EMAIL"),
    )


def validate_settings(settings: Settings) -> list[str]:
    """Log a warning for each production feature left unconfigured."""
    warnings: list[str] = []
    if not settings.is_production:
        return warnings

    if not settings.queue_enabled:
        warnings.append("queue endpoint not set - async processing disabled")
    if not settings.resend_api_key:
        warnings.append("RESEND_API_KEY not set - email sending disabled")
    if not settings.twilio_account_sid:
        warnings.append("TWILIO_ACCOUNT_SID not set - SMS sending disabled")

    for message in warnings:
        logger.warning("configuration_incomplete", detail=message)
    return warnings


def _optional_env(name: str) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise RuntimeError(f"Invalid integer value for {name}: {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be > 0")
    return value


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise RuntimeError(f"Invalid boolean value for {name}: {raw!r}")


def _env_csv(name: str) -> tuple[str, ...]:
    raw = os.getenv(name, "")
    return tuple(item.strip() for item in raw.split(",") if item.strip())
