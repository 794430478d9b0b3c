"""Load seed employees into the database.

Usage:
    python scripts/load_fixtures.py [--seed-file PATH] [--database-url URL]

Employees whose employee_code already exists are skipped, so the script can
be re-run safely. Tables are created first if missing.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from decimal import Decimal
from pathlib import Path

from sqlalchemy import select

from construction_payroll.config import get_settings
from construction_payroll.database import create_schema, get_engine, make_session_factory
from construction_payroll.models import Classification, Employee

DEFAULT_SEED_FILE = Path(__file__).parent / "fixtures" / "employees.json"


def read_seed_file(seed_file: Path) -> list[dict]:
    rows = json.loads(seed_file.read_text(encoding="utf-8"))
    for row in rows:
        Classification(row["classification"])
        row["daily_rate"] = Decimal(row["daily_rate"])
        row["hourly_rate"] = Decimal(row["hourly_rate"])
    return rows


async def load_fixtures(seed_file: Path, database_url: str) -> None:
    """Insert every employee in the seed file that is not already present."""
    if not seed_file.exists():
        print(f"Error: Seed file not found: {seed_file}")
        sys.exit(1)

    rows = read_seed_file(seed_file)
    print(f"Loading {len(rows)} employees from: {seed_file}")
    print(f"Target database: {database_url.split('@')[1] if '@' in database_url else database_url}")

    engine = get_engine(database_url)
    try:
        await create_schema(engine)
        factory = make_session_factory(engine)
        async with factory() as session:
            existing = set(
                (await session.execute(select(Employee.employee_code))).scalars().all()
            )
            added = 0
            for row in rows:
                if row["employee_code"] in existing:
                    continue
                session.add(Employee(**row))
                added += 1
            await session.commit()
    finally:
        await engine.dispose()

    print("\nResults:")
    print(f"  Added: {added}")
    print(f"  Skipped (already present): {len(rows) - added}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Load seed employees into the database")
    parser.add_argument(
        "--seed-file",
        type=Path,
        default=DEFAULT_SEED_FILE,
        help=f"Path to seed JSON file (default: {DEFAULT_SEED_FILE})",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=get_settings().database_url,
        help="Database URL (default: from settings)",
    )

    args = parser.parse_args()

    asyncio.run(load_fixtures(args.seed_file, args.database_url))


if __name__ == "__main__":
    main()
