"""Create a dashboard account from the command line."""

from __future__ import annotations

import argparse
import getpass
import logging
from typing import Optional, Sequence

from rosaiq_server.cli._helpers import add_common_args, configure_logging
from rosaiq_server.config import settings
from rosaiq_server.database import Base, SessionLocal, engine
from rosaiq_server.errors import SyncError
from rosaiq_server.models.user import ROLE_USER, VALID_ROLES
from rosaiq_server.services.auth_service import create_user

LOGGER = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rosaiq-create-user",
        description="Create an admin or standard dashboard user.",
    )
    add_common_args(parser)
    parser.add_argument("username", help="Login name for the new account")
    parser.add_argument("--role", choices=VALID_ROLES, default=ROLE_USER)
    parser.add_argument(
        "--password",
        help="Password for the account (prompted for when omitted)",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    password = args.password or getpass.getpass("Password: ")
    if len(password) < MIN_PASSWORD_LENGTH:
        parser.error(f"password must be at least {MIN_PASSWORD_LENGTH} characters")

    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        user = create_user(db, args.username, password, role=args.role)
    except SyncError as exc:
        LOGGER.error("Could not create user: %s", exc.message)
        return 1
    finally:
        db.close()
    print(f"Created {user.role} account {user.username} (id {user.id})")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual entry
    raise SystemExit(main())
