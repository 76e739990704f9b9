"""Storefront management CLI.

Creates and drops the database schema of the storefront domain, and mints
bearer tokens for local tooling (load tests, manual API calls).

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py issue-token user-1 --admin    # Print a bearer token
"""

import argparse
import sys


def setup_database():
    """Create the storefront schema on the configured database."""
    from storefront.domain import storefront
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Creating storefront database schema...")
    setup_db(storefront)
    print("Done.")


def drop_database():
    """Drop the storefront schema from the configured database."""
    from storefront.domain import storefront
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    storefront.init()
    print("Dropping storefront database schema...")
    drop_db(storefront)
    print("Done.")


def issue(user_id, admin=False, hours=1):
    from datetime import timedelta

    from storefront.identity.credentials import ADMIN_ROLE, issue_token

    roles = [ADMIN_ROLE] if admin else []
    print(issue_token(user_id, roles=roles, expires_in=timedelta(hours=hours)))


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    token_parser = subparsers.add_parser("issue-token", help="Print a bearer token signed with STOREFRONT_AUTH_SECRET")
    token_parser.add_argument("user_id")
    token_parser.add_argument("--admin", action="store_true", help="Grant the admin role")
    token_parser.add_argument("--hours", type=int, default=1, help="Token lifetime in hours")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "issue-token":
        issue(args.user_id, admin=args.admin, hours=args.hours)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
