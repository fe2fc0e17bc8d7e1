"""Seed demo locations, fleet and pricing policies into an empty database."""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import suppress

from rental.db import database
from rental.services.seeding import seed_demo_data


logger = logging.getLogger("rental.scripts.seed_demo_data")


# Access SessionLocal dynamically so test fixtures that rebind the
# sessionmaker are respected.
SessionLocal = lambda: database.SessionLocal()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed demo data for the rental service")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be seeded without writing anything",
    )
    return parser.parse_args(argv)


def seed(dry_run: bool) -> int:
    session = SessionLocal()
    try:
        counts = seed_demo_data(session, dry_run=dry_run)
        summary = ", ".join(f"{table}={count}" for table, count in counts.items())
        if dry_run:
            print(f"Dry run: would seed {summary}; no changes made.")
        else:
            print(f"Seeded {summary}.")
        logger.info("Demo data seed finished", extra={"dry_run": dry_run, **counts})
        return 0
    finally:
        with suppress(Exception):
            session.close()


def main(argv: list[str] | None = None) -> int:
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    return seed(dry_run=args.dry_run)


if __name__ == "__main__":  # pragma: no cover - manual execution path
    sys.exit(main())
