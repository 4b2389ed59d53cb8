# scripts/setup/init_db.py
"""
Initialize database. Creates the key-value store table and seeds the
default tariff table if none is stored yet.
Run once before first launch.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text

from parkdesk.database import create_tables, engine, SessionLocal
from parkdesk.config import settings
from parkdesk.services.records import ParkingRecords
from parkdesk.services.store import SqlKeyValueStore, PARKING_RATES


def main():
    print("🗄️  ParkDesk DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    # Test connection
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = inspect(engine).get_table_names()
    for t in tables:
        print(f"   ✓ {t}")

    db = SessionLocal()
    try:
        store = SqlKeyValueStore(db)
        records = ParkingRecords(store)
        if store.get(PARKING_RATES) is None:
            records.save_tariffs(records.load_tariffs())
            print("\n💲 Default tariffs stored")
        else:
            print("\n💲 Tariffs already configured, left untouched")
    finally:
        db.close()

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn parkdesk.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
