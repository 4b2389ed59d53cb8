# tests/test_store.py
"""Unit tests for the key-value store backends, change notifications and live totals."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from contextlib import contextmanager
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from parkdesk.database import create_tables
from parkdesk.errors import MalformedStoredData
from parkdesk.models.store_entry import StoreEntry
from parkdesk.schemas.records import VehicleKind
from parkdesk.services import store as keys
from parkdesk.services.cash_ledger import CashLedger
from parkdesk.services.live_totals import LiveTotals
from parkdesk.services.records import ParkingRecords
from parkdesk.services.session_service import SessionManager
from parkdesk.services.store import InMemoryKeyValueStore, SqlKeyValueStore, StoreNotifier


@pytest.fixture
def db():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


class TestInMemoryStore:
    def test_missing_key_is_none(self):
        assert InMemoryKeyValueStore().get("nothing") is None

    def test_values_are_copied(self):
        store = InMemoryKeyValueStore({"k": [1, 2]})
        value = store.get("k")
        value.append(3)
        assert store.get("k") == [1, 2]

    def test_malformed_json_raises(self):
        store = InMemoryKeyValueStore()
        store.put_raw("k", "[1, 2")
        with pytest.raises(MalformedStoredData):
            store.get("k")

    def test_set_many_notifies_each_key(self):
        store = InMemoryKeyValueStore()
        handler = MagicMock()
        store.subscribe("a", handler)
        store.subscribe("b", handler)
        store.set_many({"a": 1, "b": 2, "c": 3})
        assert handler.call_count == 2
        handler.assert_any_call("a", 1)
        handler.assert_any_call("b", 2)


class TestStoreNotifier:
    def test_unsubscribe(self):
        notifier = StoreNotifier()
        handler = MagicMock()
        unsubscribe = notifier.subscribe("k", handler)
        unsubscribe()
        notifier.publish("k", 1)
        handler.assert_not_called()

    def test_failing_handler_does_not_stop_others(self):
        notifier = StoreNotifier()
        broken = MagicMock(side_effect=RuntimeError("boom"))
        healthy = MagicMock()
        notifier.subscribe("k", broken)
        notifier.subscribe("k", healthy)
        notifier.publish("k", 1)
        healthy.assert_called_once_with("k", 1)


class TestSqlStore:
    def test_set_and_get(self, db):
        store = SqlKeyValueStore(db, StoreNotifier())
        store.set("vehicleRegistry", [{"plate": "ABC123"}])
        assert store.get("vehicleRegistry") == [{"plate": "ABC123"}]
        assert db.get(StoreEntry, "vehicleRegistry").updated_at is not None

    def test_overwrite_keeps_one_row(self, db):
        store = SqlKeyValueStore(db, StoreNotifier())
        store.set("k", 1)
        store.set("k", 2)
        assert store.get("k") == 2
        assert db.query(StoreEntry).count() == 1

    def test_write_failure_rolls_back(self):
        session = MagicMock()
        session.commit.side_effect = RuntimeError("disk full")
        session.get.return_value = None
        store = SqlKeyValueStore(session, StoreNotifier())
        with pytest.raises(RuntimeError):
            store.set("k", 1)
        session.rollback.assert_called_once()

    def test_malformed_row_recovered_by_records(self, db):
        db.add(StoreEntry(key=keys.INCOME_RECORDS, value="{broken", updated_at=datetime.now()))
        db.commit()
        records = ParkingRecords(SqlKeyValueStore(db, StoreNotifier()))
        assert records.load_income() == []

    def test_full_round_trip_through_sql(self, db):
        now = datetime(2026, 10, 19, 8, 0)
        records = ParkingRecords(SqlKeyValueStore(db, StoreNotifier()), lambda: now)
        manager = SessionManager(records)
        manager.register_entry("SQL001", VehicleKind.CAR, "Mazda")
        assert [s.plate for s in records.load_active()] == ["SQL001"]


class Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def make_totals(initial=None, now=datetime(2026, 10, 19, 8, 0)):
    """LiveTotals over an in-memory store; every rebuild reuses the same records."""
    store = InMemoryKeyValueStore(initial)
    clock = Clock(now)
    records = ParkingRecords(store, clock)

    @contextmanager
    def open_records():
        yield records

    return LiveTotals(open_records, store.notifier, clock), records, store, clock


class TestLiveTotals:
    def test_cache_invalidated_on_store_change(self):
        totals, records, _, clock = make_totals()
        assert totals.get().vehicles_inside == 0

        manager = SessionManager(records)
        manager.register_entry("ABC123", VehicleKind.CAR, "Toyota")
        assert totals.get().vehicles_inside == 1

        clock.now += timedelta(minutes=30)
        manager.register_exit("ABC123")
        current = totals.get()
        assert current.vehicles_inside == 0
        assert current.income_today == 2400
        assert current.cash_on_hand == 2400

    def test_cached_value_reused_without_changes(self):
        totals, _, _, _ = make_totals()
        assert totals.get() is totals.get()

    def test_unrelated_key_keeps_cache(self):
        totals, _, store, _ = make_totals()
        first = totals.get()
        store.set(keys.PARKING_RATES, {})
        assert totals.get() is first

    def test_day_change_refreshes(self):
        totals, _, _, clock = make_totals(
            {keys.CASH_START: {"date_key": "2026-10-19", "amount": 500}},
            now=datetime(2026, 10, 19, 23, 59),
        )
        assert totals.get().cash_on_hand == 500
        clock.now += timedelta(minutes=2)
        refreshed = totals.get()
        assert refreshed.date_key == "2026-10-20"
        assert refreshed.cash_on_hand == 0

    def test_write_during_rebuild_is_not_cached(self):
        totals, records, store, _ = make_totals()
        load_active = records.load_active
        writes = []

        def load_active_with_concurrent_write():
            # Lands after the cash summary was read, before the rebuild finishes
            if not writes:
                writes.append(True)
                store.set(keys.CASH_START, {"date_key": "2026-10-19", "amount": 5000})
            return load_active()

        records.load_active = load_active_with_concurrent_write
        assert totals.get().cash_on_hand == 0
        assert totals.get().cash_on_hand == 5000
        assert CashLedger(records).cash_on_hand() == 5000

    def test_each_rebuild_opens_fresh_records(self):
        store = InMemoryKeyValueStore()
        opened = []

        @contextmanager
        def open_records():
            opened.append(True)
            yield ParkingRecords(store, lambda: datetime(2026, 10, 19, 8, 0))

        totals = LiveTotals(open_records, store.notifier, lambda: datetime(2026, 10, 19, 8, 0))
        totals.get()
        totals.get()
        store.set(keys.ACTIVE_VEHICLES, [])
        totals.get()
        assert len(opened) == 2

    def test_close_unsubscribes(self):
        totals, _, store, _ = make_totals()
        first = totals.get()
        totals.close()
        store.set(keys.ACTIVE_VEHICLES, [])
        assert totals.get() is first
