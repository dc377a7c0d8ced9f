#!/usr/bin/env python3
"""Dispatch one notification, or a bulk JSON file of them.

Queue mode is active when SQS_QUEUE_URL (or KAFKA_BOOTSTRAP_SERVERS with
QUEUE_BACKEND=kafka) is set; otherwise delivery happens right away.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from notification_dispatch.application.process import (  # noqa: E402
    dispatch_request,
    dispatch_requests,
)
from notification_dispatch.bootstrap import build_router, build_senders  # noqa: E402
from notification_dispatch.config import load_settings, validate_settings  # noqa: E402
from notification_dispatch.errors import QueueSubmissionError, ValidationError  # noqa: E402
from notification_dispatch.logging_setup import configure_logging  # noqa: E402


def main() -> int:
    args = parse_args()
    settings = load_settings(REPO_ROOT / ".env")
    configure_logging(settings.log_level, is_production=settings.is_production)
    validate_settings(settings)

    router = build_router(settings, senders=build_senders(settings, console=args.console))

    try:
        if args.requests_file is not None:
            results = dispatch_requests(
                router,
                load_requests(args.requests_file),
                max_batch_size=settings.bulk_max_notifications,
            )
        else:
            results = [dispatch_request(router, build_request(args))]
    except ValidationError as exc:
        print(f"[INVALID] {exc}")
        return 2
    except QueueSubmissionError as exc:
        print(f"[QUEUE ERROR] {exc}")
        print(f"accepted_ids={exc.accepted_ids}")
        return 1

    print("[ACCEPTED]")
    for result in results:
        print(f"id={result.id} mode={result.mode} delivered={result.delivered} error={result.error}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dispatch email, SMS or push notifications.")
    parser.add_argument("--type", choices=("email", "sms", "push"), help="Channel type.")
    parser.add_argument("--to", help="Email address, E.164 phone number or device token.")
    parser.add_argument("--subject", default=None, help="Email subject or push title.")
    parser.add_argument("--body", help="Message body.")
    parser.add_argument("--priority", choices=("high", "normal", "low"), default=None)
    parser.add_argument("--user-id", default=None)
    parser.add_argument(
        "--requests-file",
        type=Path,
        default=None,
        help="JSON file holding a list of notification requests (bulk send).",
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Print to the console instead of calling real providers.",
    )
    return parser.parse_args()


def build_request(args: argparse.Namespace) -> dict[str, Any]:
    request = {
        "type": args.type,
        "to": args.to,
        "subject": args.subject,
        "body": args.body,
        "priority": args.priority,
        "userId": args.user_id,
    }
    return {key: value for key, value in request.items() if value is not None}


def load_requests(requests_file: Path) -> list[dict[str, Any]]:
    with requests_file.open("r", encoding="utf-8") as file_handle:
        payload = json.load(file_handle)
    if isinstance(payload, dict):
        payload = payload.get("notifications")
    return payload


if __name__ == "__main__":
    sys.exit(main())
