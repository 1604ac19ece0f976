#!/usr/bin/env python3
"""
Jobboard -- administrative command line.

The HTTP API never lets an anonymous caller create an admin, so the first
admin account has to come from here.

Usage:
  python main.py init-db
  python main.py create-admin alice --email alice@example.com --first-name Alice --last-name Smith
  python main.py issue-token alice

Environment variables (see core/config.py):
  SECRET_KEY     Signing key for tokens (required unless DEBUG=true)
  DATABASE_URL   SQLAlchemy URL, defaults to ./jobboard.db
"""

import argparse
import getpass
import sys

from auth.models import User
from auth.store import UserStore
from auth.tokens import create_token
from core.config import get_settings
from core.db import make_engine
from core.errors import JobBoardError


def _cmd_init_db(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = make_engine(settings.database_url)
    engine.dispose()
    print(f"  Tables ready in {settings.database_url}")
    return 0


def _cmd_create_admin(args: argparse.Namespace) -> int:
    settings = get_settings()
    password = args.password or getpass.getpass("  Password: ")
    if not 5 <= len(password) <= 20:
        print("  [!] Password must be 5 to 20 characters.")
        return 1
    engine = make_engine(settings.database_url)
    store = UserStore(engine, bcrypt_rounds=settings.bcrypt_work_factor)
    try:
        store.register(
            User(
                username=args.username,
                first_name=args.first_name,
                last_name=args.last_name,
                email=args.email,
                is_admin=True,
            ),
            password,
        )
    except JobBoardError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        engine.dispose()
    print(f"  Admin '{args.username}' created.")
    return 0


def _cmd_issue_token(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = make_engine(settings.database_url)
    store = UserStore(engine, bcrypt_rounds=settings.bcrypt_work_factor)
    try:
        user = store.get(args.username)
    except JobBoardError as exc:
        print(f"  [!] {exc.message}")
        return 1
    finally:
        engine.dispose()
    print(create_token(user, settings.secret_key, expire_seconds=args.expires))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="jobboard",
        description="Administrative tasks for the Jobboard API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    init_db = sub.add_parser("init-db", help="Create any missing tables")
    init_db.set_defaults(func=_cmd_init_db)

    create_admin = sub.add_parser("create-admin", help="Register an administrator account")
    create_admin.add_argument("username")
    create_admin.add_argument("--email", required=True)
    create_admin.add_argument("--first-name", required=True)
    create_admin.add_argument("--last-name", required=True)
    create_admin.add_argument(
        "--password",
        default=None,
        help="Password (prompted for when omitted; avoid passing it on shared machines)",
    )
    create_admin.set_defaults(func=_cmd_create_admin)

    issue_token = sub.add_parser("issue-token", help="Print a signed token for an existing user")
    issue_token.add_argument("username")
    issue_token.add_argument(
        "--expires",
        type=int,
        default=0,
        metavar="SECONDS",
        help="Token lifetime in seconds (default: TOKEN_EXPIRE_SECONDS)",
    )
    issue_token.set_defaults(func=_cmd_issue_token)

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
