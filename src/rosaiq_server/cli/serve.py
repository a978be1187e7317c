"""Run the sync API under uvicorn."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

import uvicorn

from rosaiq_server.cli._helpers import add_common_args, configure_logging
from rosaiq_server.config import settings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rosaiq-server",
        description="Serve the device sync and dashboard API.",
    )
    add_common_args(parser)
    parser.add_argument("--host", default="0.0.0.0", help="Bind address (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=3000, help="Listen port (default: 3000)")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    uvicorn.run(
        "rosaiq_server.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if args.verbose else settings.LOG_LEVEL.lower(),
    )
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry
    raise SystemExit(main())
