#!/usr/bin/env python3
"""Dispatch sample notifications locally, without a queue or real providers."""

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

from notification_dispatch.application.process import dispatch_requests  # noqa: E402
from notification_dispatch.bootstrap import build_router, build_senders  # noqa: E402
from notification_dispatch.config import Settings  # noqa: E402
from notification_dispatch.logging_setup import configure_logging  # noqa: E402


def main() -> int:
    args = parse_args()
    configure_logging("INFO")
    settings = Settings()
    router = build_router(settings, senders=build_senders(settings, console=True))

    results = dispatch_requests(router, load_requests(args.requests_file))

    print("")
    print("[SUMMARY]")
    for result in results:
        print(
            f"id={result.id} mode={result.mode} "
            f"delivered={result.delivered} error={result.error}"
        )
    return 0 if all(result.delivered for result in results) else 1


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Execute email/sms/push dispatch with sample requests."
    )
    parser.add_argument(
        "--requests-file",
        type=Path,
        default=None,
        help="Optional JSON file with a list of notification requests.",
    )
    return parser.parse_args()


def load_requests(requests_file: Path | None) -> list[dict[str, Any]]:
    if requests_file is None:
        return sample_requests()
    with requests_file.open("r", encoding="utf-8") as file_handle:
        return json.load(file_handle)


def sample_requests() -> list[dict[str, Any]]:
    return [
        {"type": "email", "to": "user@example.com", "body": "Your ride is confirmed."},
        {"type": "sms", "to": "+15555550123", "body": "Driver arriving in 3 minutes."},
        {
            "type": "push",
            "to": "device-token-demo-1",
            "subject": "Ride update",
            "body": "Your driver has arrived.",
            "priority": "high",
            "data": {"ride_id": "ride-demo-1"},
        },
    ]


if __name__ == "__main__":
    sys.exit(main())
