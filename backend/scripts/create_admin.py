#!/usr/bin/env python3
"""Provision an account with a password credential.

Public sign-up is disabled by default, so this is how the first admin is
created:

    python scripts/create_admin.py --email admin@example.com --name "Admin User"
"""
import argparse
from getpass import getpass
import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from location_api import models  # noqa: E402,F401
from location_api.config import get_settings  # noqa: E402
from location_api.database import Base, engine, get_db_context  # noqa: E402
from location_api.errors import AuthError  # noqa: E402
from location_api.services.authenticator import Authenticator  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create an account that can sign in with a password.")
    parser.add_argument("--email", help="Sign-in email (prompted if omitted)")
    parser.add_argument("--name", default="Admin User", help="Display name")
    parser.add_argument(
        "--password-env",
        metavar="VAR",
        help="Read the password from this environment variable instead of prompting",
    )
    return parser.parse_args(argv)


def read_password(args: argparse.Namespace) -> str:
    if args.password_env:
        password = os.environ.get(args.password_env, "")
        if not password:
            raise SystemExit(f"{args.password_env} is empty")
        return password

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    return pw1


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    email = args.email or input("Email: ").strip()
    password = read_password(args)

    settings = get_settings()
    Base.metadata.create_all(bind=engine)

    with get_db_context() as db:
        try:
            account = Authenticator(db, settings.secret_key).create_credential(email, password, args.name)
        except (AuthError, ValueError) as exc:
            print(f"Failed to create account: {exc}", file=sys.stderr)
            return 1

    print(f"Created account {account.id} <{account.email}>")
    return 0


if __name__ == "__main__":
    sys.exit(main())
