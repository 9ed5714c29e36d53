"""Fulfillment service management CLI.

Usage:
    python src/manage.py setup-db                          # Create all tables
    python src/manage.py drop-db                           # Drop all tables
    python src/manage.py create-admin "Ops Lead" ops@x.io  # Bootstrap an administrator
"""

import argparse
import sys


def _domain():
    from fulfillment.domain import fulfillment

    fulfillment.init()
    return fulfillment


def setup_database():
    from fulfillment.utils.db import setup_db

    domain = _domain()
    print("Creating fulfillment database schema...")
    providers = setup_db(domain)
    if providers:
        print(f"  Schema ready on: {', '.join(providers)}")
    else:
        print("  No SQL providers configured (set PROTEAN_ENV); nothing to create.")


def drop_database():
    from fulfillment.utils.db import drop_db

    domain = _domain()
    print("Dropping fulfillment database schema...")
    providers = drop_db(domain)
    print(f"  Dropped on: {', '.join(providers) or 'none'}")


def create_admin(name: str, email: str):
    """Register an administrator directly; needed once before any order can be changed."""
    from fulfillment.staff.management import RegisterStaff
    from fulfillment.staff.staff import StaffRoleType

    domain = _domain()
    with domain.domain_context():
        staff_id = domain.process(
            RegisterStaff(name=name, email=email, role=StaffRoleType.ADMIN.value),
            asynchronous=False,
        )
    print(f"Administrator {email} registered with id {staff_id}")


def main():
    parser = argparse.ArgumentParser(description="Fulfillment service management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    admin_parser = subparsers.add_parser("create-admin", help="Register an administrator")
    admin_parser.add_argument("name")
    admin_parser.add_argument("email")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "create-admin":
        create_admin(args.name, args.email)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
