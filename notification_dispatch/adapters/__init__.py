"""Adapter layer: payload mapping, provider senders and queue transports."""

from .consumer_handler import handle_batch, handle_message
from .fake_senders import send_email_via_console, send_push_via_console, send_sms_via_console
from .kafka_runtime import KafkaQueueClient, run_kafka_worker_forever
from .payload import build_envelope, envelope_to_message_body, parse_message_body
from .real_senders import FirebasePushSender, ResendEmailSender, TwilioSmsSender
from .sqs_queue import SqsQueueClient, run_sqs_worker_forever

__all__ = [
    "FirebasePushSender",
    "KafkaQueueClient",
    "ResendEmailSender",
    "SqsQueueClient",
    "TwilioSmsSender",
    "build_envelope",
    "envelope_to_message_body",
    "handle_batch",
    "handle_message",
    "parse_message_body",
    "run_kafka_worker_forever",
    "run_sqs_worker_forever",
    "send_email_via_console",
    "send_push_via_console",
    "send_sms_via_console",
]
