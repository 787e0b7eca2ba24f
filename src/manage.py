"""Stock ledger database management CLI.

Creates or drops the stock ledger tables on the SQL providers configured in
``domain.toml`` (memory providers are skipped).

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db
    PROTEAN_ENV=production python src/manage.py drop-db
"""

import argparse
import sys


def setup_database():
    from stockledger.domain import stockledger
    from stockledger.utils.db import setup_db

    print("Initializing stockledger domain...")
    stockledger.init()
    touched = setup_db(stockledger)
    if not touched:
        print("  No SQL providers configured; nothing to create.")
    for name in touched:
        print(f"  Schema ready on provider '{name}'.")
    print("Done.")


def drop_database():
    from stockledger.domain import stockledger
    from stockledger.utils.db import drop_db

    print("Initializing stockledger domain...")
    stockledger.init()
    touched = drop_db(stockledger)
    if not touched:
        print("  No SQL providers configured; nothing to drop.")
    for name in touched:
        print(f"  Schema dropped on provider '{name}'.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Stock ledger database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
