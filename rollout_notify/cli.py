"""Command line for sending a one-off rollout notification.

Examples:
    rollout-notify phase --url https://hooks.example/generic \\
        --name podinfo --namespace test --phase Progressing --meta team=sre
    rollout-notify event --url https://hooks.slack.com/services/T/B/X \\
        --name podinfo --namespace test --phase Progressing \\
        --message "rollback triggered" --type Warning
"""

from __future__ import annotations

import argparse
import sys
from typing import Dict, List, Optional

from rollout_notify.core.errors import NotificationError
from rollout_notify.core.notifications import (
    EventSource,
    EventType,
    WebhookDispatcher,
    WebhookNotifier,
    WebhookTarget,
)
from rollout_notify.utils.logging import setup_logging


def _parse_meta(pairs: Optional[List[str]]) -> Optional[Dict[str, str]]:
    if not pairs:
        return None
    metadata: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise argparse.ArgumentTypeError(f"metadata must be key=value, got {pair!r}")
        # first occurrence wins
        metadata.setdefault(key, value)
    return metadata


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rollout-notify",
        description="Send a rollout notification to a webhook",
    )
    parser.add_argument("--log-level", help="Override ROLLOUT_NOTIFY_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    for command, help_text in (
        ("phase", "Notify a phase change"),
        ("event", "Notify an operational event"),
    ):
        p = sub.add_parser(command, help=help_text)
        p.add_argument("--url", required=True, help="Webhook URL")
        p.add_argument("--name", required=True, help="Rollout name")
        p.add_argument("--namespace", required=True, help="Rollout namespace")
        p.add_argument("--phase", default="", help="Rollout phase, e.g. Progressing")
        p.add_argument(
            "--meta",
            action="append",
            metavar="KEY=VALUE",
            help="Metadata entry (repeatable)",
        )
        if command == "phase":
            p.add_argument("--timeout", default="", help="Duration, e.g. 30s (default 10s)")
        else:
            p.add_argument("--message", required=True, help="Event message")
            p.add_argument(
                "--type",
                dest="event_type",
                default=EventType.NORMAL.value,
                choices=[t.value for t in EventType],
                help="Event severity",
            )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        metadata = _parse_meta(args.meta)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    notifier = WebhookNotifier(dispatcher=WebhookDispatcher())
    try:
        if args.command == "phase":
            target = WebhookTarget(url=args.url, timeout=args.timeout, metadata=metadata)
            notifier.notify(args.name, args.namespace, args.phase, target)
        else:
            target = WebhookTarget(url=args.url, metadata=metadata)
            source = EventSource(name=args.name, namespace=args.namespace, phase=args.phase)
            notifier.notify_event(source, target, args.message, args.event_type)
    except NotificationError as e:
        print(f"notification failed ({e.code.value}): {e}", file=sys.stderr)
        return 1

    print("notification sent")
    return 0


if __name__ == "__main__":
    sys.exit(main())
