# tests/test_cash_ledger.py
"""Unit tests for the daily cash drawer."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from datetime import datetime, timedelta
from parkdesk.errors import InsufficientFunds, InvalidAmount
from parkdesk.schemas.records import CashStart
from parkdesk.services import store as keys
from parkdesk.services.cash_ledger import CashLedger, compute_cash_on_hand
from parkdesk.services.records import ParkingRecords
from parkdesk.services.store import InMemoryKeyValueStore

NOW = datetime(2026, 10, 19, 12, 0)


def income(amount, ts=NOW, id_="income_1"):
    return {
        "id": id_, "timestamp": ts.isoformat(), "plate": "ABC123", "vehicle_kind": "car",
        "brand": "", "payment_kind": "time_based", "amount": amount,
        "entry_timestamp": ts.isoformat(), "exit_timestamp": ts.isoformat(), "duration_minutes": 30,
    }


def make_ledger(initial=None, now=NOW):
    store = InMemoryKeyValueStore(initial)
    return CashLedger(ParkingRecords(store, lambda: now)), store


class TestCashLedger:
    def test_cash_on_hand_formula(self):
        assert compute_cash_on_hand(CashStart(date_key="2026-10-19", amount=10000), 50000, 20000) == 40000

    def test_summary_combines_start_income_and_withdrawals(self):
        ledger, _ = make_ledger({
            keys.CASH_START: {"date_key": "2026-10-19", "amount": 10000},
            keys.INCOME_RECORDS: [
                income(20000, id_="income_a"),
                income(15000, id_="income_b"),
                income(99999, ts=NOW - timedelta(days=1), id_="income_old"),
            ],
        })
        ledger.add_withdrawal(5000, "supplies")
        summary = ledger.summary()
        assert summary.start == 10000
        assert summary.income == 35000
        assert summary.withdrawals == 5000
        assert summary.cash_on_hand == 40000

    def test_cash_start_from_another_day_reads_zero(self):
        ledger, _ = make_ledger({keys.CASH_START: {"date_key": "2026-10-18", "amount": 50000}})
        start = ledger.get_cash_start()
        assert start.amount == 0
        assert start.date_key == "2026-10-19"

    def test_set_cash_start(self):
        ledger, _ = make_ledger()
        ledger.set_cash_start("25000")
        assert ledger.get_cash_start().amount == 25000

    @pytest.mark.parametrize("amount", [-1, "abc", None, True, 12.5])
    def test_invalid_cash_start_rejected(self, amount):
        ledger, _ = make_ledger()
        with pytest.raises(InvalidAmount):
            ledger.set_cash_start(amount)

    @pytest.mark.parametrize("amount", [0, -100, "x"])
    def test_invalid_withdrawal_rejected(self, amount):
        ledger, _ = make_ledger({keys.CASH_START: {"date_key": "2026-10-19", "amount": 10000}})
        with pytest.raises(InvalidAmount):
            ledger.add_withdrawal(amount)

    def test_withdrawal_beyond_cash_on_hand_leaves_ledger_unchanged(self):
        ledger, store = make_ledger({keys.CASH_START: {"date_key": "2026-10-19", "amount": 1000}})
        with pytest.raises(InsufficientFunds):
            ledger.add_withdrawal(1001)
        assert store.raw(keys.CASH_WITHDRAWALS) is None
        assert ledger.cash_on_hand() == 1000

    def test_withdrawing_everything_is_allowed(self):
        ledger, _ = make_ledger({keys.CASH_START: {"date_key": "2026-10-19", "amount": 1000}})
        withdrawal = ledger.add_withdrawal(1000, "  ")
        assert withdrawal.note is None
        assert withdrawal.id.startswith("withdraw_")
        assert ledger.cash_on_hand() == 0

    def test_withdrawals_from_other_days_ignored(self):
        ledger, _ = make_ledger({
            keys.CASH_START: {"date_key": "2026-10-19", "amount": 1000},
            keys.CASH_WITHDRAWALS: [{"id": "withdraw_old", "timestamp": "2026-10-18T10:00:00",
                                     "date_key": "2026-10-18", "amount": 700}],
        })
        assert ledger.withdrawals_today() == []
        assert ledger.cash_on_hand() == 1000
