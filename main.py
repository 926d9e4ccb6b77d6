#!/usr/bin/env python3
"""
authcore -- account administration from the command line.

Self-registration over HTTP only creates "user" accounts, so the first admin
has to come from here.

Usage:
  python main.py create-user --name "Ada Lovelace" --email ada@example.com --role admin
  echo "$PASSWORD" | python main.py create-user --name Ada --email ada@example.com --password-stdin
  python main.py list-users

Environment variables:
  DATABASE_URL   SQLAlchemy URL of the account database (default: ./authcore.db)
  SECRET_KEY     Required unless ENVIRONMENT=development
  BCRYPT_ROUNDS  bcrypt cost factor used for new hashes (default: 10)
"""

import argparse
import getpass
import re
import sys
from typing import Optional

from api.models import EMAIL_PATTERN, PASSWORD_MIN_LENGTH
from auth.errors import ConflictError
from auth.models import Role
from auth.service import AuthService, normalize_email
from auth.store import UserStore
from core.config import get_settings


def _read_password(from_stdin: bool) -> Optional[str]:
    """Read a password without echoing it. Returns None if confirmation fails."""
    if from_stdin:
        return sys.stdin.readline().rstrip("\n")
    password = getpass.getpass("Password: ")
    if getpass.getpass("Confirm password: ") != password:
        print("  [!] Passwords do not match.")
        return None
    return password


def _create_user(args: argparse.Namespace, store: UserStore) -> int:
    email = normalize_email(args.email)
    if not re.match(EMAIL_PATTERN, email):
        print(f"  [!] '{args.email}' doesn't look like an email address.")
        return 2
    if not args.name.strip():
        print("  [!] --name must not be empty.")
        return 2

    password = _read_password(args.password_stdin)
    if password is None:
        return 1
    if len(password) < PASSWORD_MIN_LENGTH:
        print(f"  [!] Password must be at least {PASSWORD_MIN_LENGTH} characters.")
        return 2

    service = AuthService.from_settings(store, get_settings())
    try:
        user = service.create_account(args.name.strip(), email, password, args.role)
    except ConflictError:
        print(f"  [!] An account for {email} already exists.")
        return 1
    print(f"  Created {user.role} account #{user.id} for {user.email}.")
    return 0


def _list_users(store: UserStore) -> int:
    users = store.list_users()
    if not users:
        print("  No accounts yet.")
        return 0
    for user in users:
        print(f"  #{user.id:<5} {user.role:<6} {user.email}  ({user.name})")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="authcore",
        description="Account administration for the authcore API.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py create-user --name Admin --email admin@example.com --role admin
  python main.py --db-url sqlite:///authcore.db list-users
        """,
    )
    parser.add_argument(
        "--db-url",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL from the environment)",
    )
    commands = parser.add_subparsers(dest="command", metavar="COMMAND")

    create = commands.add_parser("create-user", help="Create an account")
    create.add_argument("--name", required=True, help="Display name")
    create.add_argument("--email", required=True, help="Login email (stored lowercased)")
    create.add_argument(
        "--role",
        choices=[r.value for r in Role],
        default=Role.USER.value,
        help="Account role (default: user)",
    )
    create.add_argument(
        "--password-stdin",
        action="store_true",
        help="Read the password from the first line of stdin instead of prompting",
    )

    commands.add_parser("list-users", help="List all accounts")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    store = UserStore(args.db_url or get_settings().database_url)
    try:
        if args.command == "create-user":
            return _create_user(args, store)
        return _list_users(store)
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
