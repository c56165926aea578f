"""
Database seeding script.

Replaces the database contents with the demo fleet (admin, dispatcher,
five drivers, vehicles, trips, maintenance and fuel records) and
regenerates alerts. All seeded accounts use the password ``password123``.

Usage:
    python -m backend.seed_database
    python -m backend.seed_database --alerts-only
"""

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# backend/.env must be loaded before settings are built
load_dotenv(Path(__file__).parent / ".env")

from backend.app.core.config import settings
from backend.app.core.observability import configure_logging
from backend.app.db.session import Database
from backend.app.services.alert_generation import regenerate_alerts
from backend.app.services.seeding import SEED_PASSWORD, seed_database


async def run(alerts_only: bool = False) -> None:
    database = Database(settings.database_url, echo=settings.db_echo)
    await database.connect()
    try:
        await database.create_all()
        async with database.session() as db:
            if alerts_only:
                print("🔔 Regenerating alerts...")
                alerts = await regenerate_alerts(db)
                print(f"✅ {len(alerts)} alerts generated")
                return

            print("🌱 Seeding database...")
            summary = await seed_database(db)
    finally:
        await database.dispose()

    print("\n🎉 Database seeding completed successfully!")
    print(f"  - users:        {summary.users}")
    print(f"  - vehicles:     {summary.vehicles}")
    print(f"  - drivers:      {summary.drivers}")
    print(f"  - trips:        {summary.trips}")
    print(f"  - maintenance:  {summary.maintenance}")
    print(f"  - fuel records: {summary.fuel_records}")
    print(f"  - alerts:       {summary.alerts}")
    print("\nSeeded accounts (password: %s):" % SEED_PASSWORD)
    print("  - admin@aivodrive.com")
    print("  - dispatcher@aivodrive.com")
    print("  - driver1@aivodrive.com .. driver5@aivodrive.com")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the AivoDrive database with demo data")
    parser.add_argument("--alerts-only", action="store_true", help="only regenerate alerts from current data")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(alerts_only=args.alerts_only))


if __name__ == "__main__":
    main()
