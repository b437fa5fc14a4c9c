"""Marketplace management CLI.

Usage:
    python src/manage.py setup-db                              # Create all tables
    python src/manage.py drop-db                               # Drop all tables
    python src/manage.py bootstrap-admin --admin-id <user-id>  # One-time admin setup
    python src/manage.py compute-rider-payouts --week-start 2026-10-05
"""

import argparse
import sys
from datetime import date


def _domain():
    from marketplace.domain import marketplace
    from marketplace.utils.logging import configure_logging

    configure_logging()
    marketplace.init()
    return marketplace


def setup_database():
    from marketplace.utils.db import setup_db

    domain = _domain()
    print("Creating marketplace database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from marketplace.utils.db import drop_db

    domain = _domain()
    print("Dropping marketplace database schema...")
    drop_db(domain)
    print("Done.")


def bootstrap_admin(admin_id: str):
    from marketplace.directory.admin import bootstrap_admin as bootstrap

    domain = _domain()
    with domain.domain_context():
        admin = bootstrap(admin_id)
    print(f"Platform admin {admin.admin_id} created.")


def compute_rider_payouts(week_start: date, rate: float | None = None):
    from marketplace.payout.weekly import ComputeRiderPayouts

    domain = _domain()
    with domain.domain_context():
        summary = domain.process(ComputeRiderPayouts(week_start=week_start, rate=rate), asynchronous=False)
    print(
        f"Week of {week_start.isoformat()}: {summary['created']} created, "
        f"{summary['revised']} revised, {summary['unchanged']} unchanged, "
        f"{summary['paid_skipped']} already paid."
    )


def main():
    parser = argparse.ArgumentParser(description="Marketplace management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    admin_parser = subparsers.add_parser("bootstrap-admin", help="Create the first platform admin")
    admin_parser.add_argument("--admin-id", required=True)

    payout_parser = subparsers.add_parser("compute-rider-payouts", help="Run the weekly rider payout batch")
    payout_parser.add_argument("--week-start", required=True, type=date.fromisoformat, help="Any day of the week, YYYY-MM-DD")
    payout_parser.add_argument("--rate", type=float, help="Amount per delivery (default: MARKETPLACE_RIDER_RATE)")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "bootstrap-admin":
        bootstrap_admin(args.admin_id)
    elif args.command == "compute-rider-payouts":
        compute_rider_payouts(args.week_start, args.rate)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
