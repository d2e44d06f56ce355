"""Modett database management CLI.

Provides commands to create and drop database schemas for all domains.
Every domain shares the schema helpers in `shared.db`.

Usage:
    python src/manage.py setup-db                       # Create all tables
    python src/manage.py drop-db --domain cart analytics # Drop selected domains
"""

import argparse
import sys

from shared.db import drop_db, setup_db

DOMAIN_NAMES = [
    "product_catalog",
    "cart",
    "order_management",
    "payment_loyalty",
    "customer_care",
    "engagement",
    "user_management",
    "analytics",
]


def _load_domains(names=None):
    from analytics.domain import analytics
    from cart.domain import cart
    from customer_care.domain import customer_care
    from engagement.domain import engagement
    from order_management.domain import order_management
    from payment_loyalty.domain import payment_loyalty
    from product_catalog.domain import product_catalog
    from user_management.domain import user_management

    all_domains = {
        "product_catalog": product_catalog,
        "cart": cart,
        "order_management": order_management,
        "payment_loyalty": payment_loyalty,
        "customer_care": customer_care,
        "engagement": engagement,
        "user_management": user_management,
        "analytics": analytics,
    }
    return {name: all_domains[name] for name in names} if names else all_domains


def setup_databases(domains=None):
    """Create database schemas for the specified (or all) domains."""
    for name, domain in _load_domains(domains).items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Creating {name} database schema...")
        setup_db(domain)
        print(f"  {name} schema ready.")

    print("Done.")


def drop_databases(domains=None):
    """Drop database schemas for the specified (or all) domains."""
    for name, domain in _load_domains(domains).items():
        print(f"Initializing {name} domain...")
        domain.init()
        print(f"Dropping {name} database schema...")
        drop_db(domain)
        print(f"  {name} schema dropped.")

    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Modett database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    setup_parser = subparsers.add_parser("setup-db", help="Create all database tables")
    setup_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to set up (default: all)",
    )

    drop_parser = subparsers.add_parser("drop-db", help="Drop all database tables")
    drop_parser.add_argument(
        "--domain",
        choices=DOMAIN_NAMES,
        nargs="*",
        help="Specific domain(s) to drop (default: all)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases(args.domain)
    elif args.command == "drop-db":
        drop_databases(args.domain)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
