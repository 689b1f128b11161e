"""
Script to create all database tables.

This script creates all tables defined in the models.
Run this after starting PostgreSQL, or use Alembic for managed schemas.
"""
import asyncio
import sys

from atlasstudio.database import create_all_tables, drop_all_tables


async def main(reset: bool = False):
    """Main entry point."""
    if reset:
        print("Dropping database tables...")
        await drop_all_tables()
    print("Creating database tables...")
    await create_all_tables()
    print("Done!")


if __name__ == "__main__":
    asyncio.run(main(reset="--reset" in sys.argv[1:]))
