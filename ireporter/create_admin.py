"""Command-line entry point that seeds (or promotes) an admin account.

Usage::

    python -m ireporter.create_admin admin@example.com --first-name Ada --last-name Obi

The password comes from ``--password`` or the ``ADMIN_PASSWORD`` environment
variable.
"""
from __future__ import annotations

import argparse
import sys

from .database import SessionLocal, init_db
from .errors import IReporterError
from .security.secrets import optional_secret
from .services.auth_service import ensure_admin


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create or promote an iReporter admin account.")
    parser.add_argument("email", help="Email address of the admin account.")
    parser.add_argument("--password", help="Password to set (default: $ADMIN_PASSWORD).")
    parser.add_argument("--first-name", default="Admin", help="First name for a new account (default: %(default)s).")
    parser.add_argument("--last-name", default="", help="Last name for a new account.")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    password = args.password or optional_secret("ADMIN_PASSWORD")
    if not password:
        print("No password given; pass --password or set ADMIN_PASSWORD.", file=sys.stderr)
        return 2

    init_db()
    with SessionLocal() as db:
        try:
            user, created = ensure_admin(
                db,
                email=args.email,
                password=password,
                first_name=args.first_name,
                last_name=args.last_name,
            )
        except IReporterError as exc:
            print(f"Could not save admin: {exc.message}", file=sys.stderr)
            return 1

    print(f"{'Created' if created else 'Promoted'} admin {user.email} ({user.public_id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
