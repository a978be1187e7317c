"""One-shot retention sweep, for cron or manual maintenance."""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence

from rosaiq_server.cli._helpers import add_common_args, configure_logging
from rosaiq_server.config import settings
from rosaiq_server.database import SessionLocal
from rosaiq_server.errors import SweepInProgressError
from rosaiq_server.services.retention import RetentionSweeper

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rosaiq-sweep",
        description="Delete measurements and events older than the retention windows.",
    )
    add_common_args(parser)
    parser.add_argument(
        "--measurement-days",
        type=int,
        default=settings.RETENTION_MEASUREMENT_DAYS,
        help="Keep measurements newer than this many days (default: %(default)s)",
    )
    parser.add_argument(
        "--event-days",
        type=int,
        default=settings.RETENTION_EVENT_DAYS,
        help="Keep events newer than this many days (default: %(default)s)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    if args.measurement_days <= 0 or args.event_days <= 0:
        parser.error("retention windows must be positive")

    sweeper = RetentionSweeper(args.measurement_days, args.event_days)
    db = SessionLocal()
    try:
        result = sweeper.sweep(db)
    except SweepInProgressError as exc:
        LOGGER.error("%s", exc.message)
        return 1
    finally:
        db.close()
    print(f"Deleted {result.measurements_deleted} measurement(s) and {result.events_deleted} event(s)")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry
    raise SystemExit(main())
