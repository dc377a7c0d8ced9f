#!/usr/bin/env python3
"""Run the queue consumer that delivers queued notifications.

The backend follows QUEUE_BACKEND (`sqs` or `kafka`).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from notification_dispatch.adapters.kafka_runtime import run_kafka_worker_forever  # noqa: E402
from notification_dispatch.adapters.sqs_queue import SqsQueueClient, run_sqs_worker_forever  # noqa: E402
from notification_dispatch.bootstrap import build_senders  # noqa: E402
from notification_dispatch.config import load_settings, validate_settings  # noqa: E402
from notification_dispatch.logging_setup import configure_logging  # noqa: E402


def main() -> int:
    args = parse_args()
    settings = load_settings(REPO_ROOT / ".env")
    configure_logging(settings.log_level, is_production=settings.is_production)
    validate_settings(settings)

    if not settings.queue_enabled:
        print("No queue endpoint configured; nothing to consume.")
        return 1

    senders = build_senders(settings, console=args.console)
    if settings.queue_backend == "kafka":
        return run_kafka_worker_forever(
            senders,
            bootstrap_servers=settings.kafka_bootstrap_servers,
            topic=settings.kafka_topic,
            group_id=settings.kafka_group_id,
            dlq_enabled=settings.kafka_dlq_enabled,
        )

    client = SqsQueueClient(settings.sqs_queue_url or "", region_name=settings.aws_region)
    return run_sqs_worker_forever(
        client,
        senders,
        wait_time_seconds=settings.sqs_wait_time_seconds,
        visibility_timeout=settings.sqs_visibility_timeout,
    )


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the notification queue consumer loop.")
    parser.add_argument(
        "--console",
        action="store_true",
        help="Print deliveries to the console instead of calling real providers.",
    )
    return parser.parse_args()


if __name__ == "__main__":
    sys.exit(main())
