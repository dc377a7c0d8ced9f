"""Composition root.

Builds the long-lived resources once per process (queue client, provider
senders) and injects them into the submitter and router. Nothing else in
the package reaches for global clients.
"""

from __future__ import annotations

from .adapters.fake_senders import (
    send_email_via_console,
    send_push_via_console,
    send_sms_via_console,
)
from .adapters.kafka_runtime import KafkaQueueClient
from .adapters.real_senders import FirebasePushSender, ResendEmailSender, TwilioSmsSender
from .adapters.sqs_queue import SqsQueueClient
from .application.router import DispatchRouter
from .application.submitter import QueueClient, QueueSubmitter
from .config import Settings
from .domain import ChannelSenders


def build_senders(settings: Settings, *, console: bool = False) -> ChannelSenders:
    """Provider senders from settings, or console senders for local runs."""
    if console:
        return ChannelSenders(
            send_email=send_email_via_console,
            send_sms=send_sms_via_console,
            send_push=send_push_via_console,
            default_subject=settings.default_subject,
            default_title=settings.default_push_title,
        )

    return ChannelSenders(
        send_email=ResendEmailSender(
            api_key=settings.resend_api_key,
            from_address=settings.email_from,
            reply_to=settings.email_reply_to,
        ),
        send_sms=TwilioSmsSender(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            from_number=settings.twilio_from_number,
            messaging_service_sid=settings.twilio_messaging_service_sid,
        ),
        send_push=FirebasePushSender(
            project_id=settings.firebase_project_id,
            private_key=settings.firebase_private_key,
            client_email=settings.firebase_client_email,
        ),
        default_subject=settings.default_subject,
        default_title=settings.default_push_title,
    )


def build_queue_client(settings: Settings) -> SqsQueueClient | KafkaQueueClient | None:
    """Return the configured queue client, or None when no endpoint is set."""
    if not settings.queue_enabled:
        return None
    if settings.queue_backend == "kafka":
        return KafkaQueueClient(settings.kafka_bootstrap_servers, settings.kafka_topic)
    return SqsQueueClient(settings.sqs_queue_url or "", region_name=settings.aws_region)


def build_router(
    settings: Settings,
    *,
    senders: ChannelSenders | None = None,
    queue_client: QueueClient | None = None,
) -> DispatchRouter:
    """Wire the dispatch router; queue mode iff a queue client exists."""
    if senders is None:
        senders = build_senders(settings)
    if queue_client is None:
        queue_client = build_queue_client(settings)

    submitter = QueueSubmitter(queue_client) if queue_client is not None else None
    return DispatchRouter(
        senders,
        submitter=submitter,
        max_workers=settings.dispatch_max_workers,
    )
