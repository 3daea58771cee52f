"""
Command-line entry point for cron-driven runs.

    subtrack renewals [--date 2024-02-01]
    subtrack notify [--days-before 10] [--date 2024-02-01]
"""

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

from subtrack.api.dependencies import (
    get_formatter,
    get_notification_sender,
    get_subscription_store,
    get_user_directory,
)
from subtrack.config.settings import get_settings
from subtrack.infrastructure.db.database import close_db
from subtrack.infrastructure.exceptions import SubTrackError
from subtrack.logging_config import configure_logging
from subtrack.services import NotifySubscriptionsService, ProcessRenewalsService


logger = logging.getLogger("subtrack.cli")


def parse_date(value: str) -> datetime:
    """ISO date or datetime; naive values are taken as UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date: {value}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="subtrack", description="Run scheduled subscription jobs")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    renewals = commands.add_parser("renewals", help="Activate ended trials and renew due subscriptions")
    renewals.add_argument("--date", type=parse_date, default=None, help="Reference date (default: now)")

    notify = commands.add_parser("notify", help="Send renewal reminders")
    notify.add_argument("--days-before", type=int, default=None, help="Notification window in days")
    notify.add_argument("--date", type=parse_date, default=None, help="Reference date (default: now)")

    return parser


async def run_command(args: argparse.Namespace) -> None:
    try:
        if args.command == "renewals":
            service = ProcessRenewalsService(get_subscription_store(), logger=logger)
            result = await service.run(args.date)
            print(
                f"activated={result.activated} renewed={result.renewed} skipped={result.skipped}"
            )
        else:
            days_before = args.days_before
            if days_before is None:
                days_before = get_settings().notification_days_before
            service = NotifySubscriptionsService(
                get_subscription_store(),
                get_user_directory(),
                get_notification_sender(),
                formatter=get_formatter(),
                logger=logger,
            )
            result = await service.run(days_before, args.date)
            print(
                f"notified={result.notifications_sent} skipped={result.users_skipped} "
                f"failed={result.failed_sends}"
            )
    finally:
        await close_db()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        asyncio.run(run_command(args))
    except SubTrackError as e:
        logger.error(f"{args.command} run failed: {e.message}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
