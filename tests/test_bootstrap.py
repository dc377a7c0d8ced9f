from __future__ import annotations

import unittest

from notification_dispatch.adapters.kafka_runtime import KafkaQueueClient
from notification_dispatch.adapters.real_senders import (
    FirebasePushSender,
    ResendEmailSender,
    TwilioSmsSender,
)
from notification_dispatch.adapters.sqs_queue import SqsQueueClient
from notification_dispatch.bootstrap import build_queue_client, build_router, build_senders
from notification_dispatch.config import Settings

from .fakes import FakeQueueClient, RecordingSenders


class BootstrapTests(unittest.TestCase):
    def test_no_queue_endpoint_means_direct_mode(self) -> None:
        settings = Settings()

        self.assertIsNone(build_queue_client(settings))
        router = build_router(settings, senders=RecordingSenders().bundle())
        self.assertFalse(router.queue_enabled)

    def test_sqs_queue_url_builds_sqs_client(self) -> None:
        client = build_queue_client(Settings(sqs_queue_url="https://sqs.example/queue"))

        self.assertIsInstance(client, SqsQueueClient)
        self.assertEqual(client.queue_url, "https://sqs.example/queue")

    def test_kafka_backend_builds_kafka_client(self) -> None:
        settings = Settings(queue_backend="kafka", kafka_bootstrap_servers=("kafka:29092",))

        client = build_queue_client(settings)

        self.assertIsInstance(client, KafkaQueueClient)
        self.assertEqual(client.topic, "notifications.dispatch")

    def test_injected_queue_client_enables_queue_mode(self) -> None:
        router = build_router(
            Settings(),
            senders=RecordingSenders().bundle(),
            queue_client=FakeQueueClient(),
        )

        self.assertTrue(router.queue_enabled)

    def test_provider_senders_use_service_name_defaults(self) -> None:
        senders = build_senders(Settings(service_name="Rides"))

        self.assertIsInstance(senders.send_email, ResendEmailSender)
        self.assertIsInstance(senders.send_sms, TwilioSmsSender)
        self.assertIsInstance(senders.send_push, FirebasePushSender)
        self.assertEqual(senders.default_subject, "Rides Notification")
        self.assertEqual(senders.default_title, "Rides")

    def test_console_senders_for_local_runs(self) -> None:
        senders = build_senders(Settings(), console=True)

        self.assertEqual(senders.send_email.__name__, "send_email_via_console")


if __name__ == "__main__":
    unittest.main()
