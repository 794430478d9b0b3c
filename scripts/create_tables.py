"""Create the payroll tables in the configured database.

Usage:
    python scripts/create_tables.py [--database-url URL]

Existing tables are left untouched.
"""

from __future__ import annotations

import argparse
import asyncio

from construction_payroll.config import get_settings
from construction_payroll.database import create_schema, get_engine
from construction_payroll.models import Base


async def create_tables(database_url: str) -> None:
    engine = get_engine(database_url)
    try:
        await create_schema(engine)
    finally:
        await engine.dispose()

    print("Tables ready:")
    for name in sorted(Base.metadata.tables):
        print(f"  {name}")


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Create payroll tables")
    parser.add_argument(
        "--database-url",
        type=str,
        default=get_settings().database_url,
        help="Database URL (default: from settings)",
    )
    args = parser.parse_args()

    asyncio.run(create_tables(args.database_url))


if __name__ == "__main__":
    main()
