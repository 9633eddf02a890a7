"""Storefront management CLI.

Usage:
    python src/manage.py setup-db             # Create all tables
    python src/manage.py drop-db              # Drop all tables
    python src/manage.py cleanup-carts        # Delete carts idle for CART_ABANDON_DAYS
    python src/manage.py cleanup-carts --days 7
"""

import argparse
import sys


def _initialized_domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    domain = _initialized_domain()
    print("Creating storefront database schema...")
    providers = setup_db(domain)
    if providers:
        print(f"  Schema ready on: {', '.join(providers)}")
    else:
        print("  No SQL provider configured; nothing to create.")
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    domain = _initialized_domain()
    print("Dropping storefront database schema...")
    providers = drop_db(domain)
    if providers:
        print(f"  Schema dropped on: {', '.join(providers)}")
    else:
        print("  No SQL provider configured; nothing to drop.")
    print("Done.")


def cleanup_carts(days=None) -> int:
    from storefront.config import get_settings
    from storefront.ordering.cart.abandonment import CleanupAbandonedCarts

    domain = _initialized_domain()
    idle_days = days or get_settings().cart_abandon_days

    with domain.domain_context():
        deleted = domain.process(CleanupAbandonedCarts(idle_days=idle_days), asynchronous=False)

    print(f"Deleted {deleted} cart(s) idle for more than {idle_days} day(s).")
    return deleted


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    cleanup_parser = subparsers.add_parser("cleanup-carts", help="Delete abandoned carts")
    cleanup_parser.add_argument("--days", type=int, default=None, help="Idle days before a cart is abandoned")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "cleanup-carts":
        cleanup_carts(args.days)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
