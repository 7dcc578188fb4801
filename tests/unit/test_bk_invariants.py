"""Tests for the balance invariant check."""

import logging
from datetime import date
from decimal import Decimal

from src.bk_common.enums import EntryResult
from src.bk_ledger.domain.invariants import balance_drift, verify_balance_invariant
from src.bk_ledger.domain.models import Account, Entry, Leg


def _entry(account_id: str, profit: str) -> Entry:
    return Entry(
        id=f"e-{account_id}-{profit}",
        account_id=account_id,
        created_date=date(2025, 3, 1),
        legs=[Leg(date(2025, 3, 1))],
        odd=Decimal("2"),
        stake=Decimal("10"),
        result=EntryResult.WIN,
        profit=Decimal(profit),
    )


ACCOUNT = Account("a1", "Main", Decimal("115.00"), Decimal("100.00"))


class TestBalanceInvariant:
    def test_consistent(self) -> None:
        entries = [_entry("a1", "20.00"), _entry("a1", "-5.00"), _entry("other", "999")]
        assert balance_drift(ACCOUNT, entries) == Decimal("0")
        assert verify_balance_invariant(ACCOUNT, entries) == []

    def test_violation_is_reported_and_logged(self, caplog) -> None:
        with caplog.at_level(logging.ERROR):
            violations = verify_balance_invariant(ACCOUNT, [_entry("a1", "10.00")])
        assert len(violations) == 1
        assert "drift=5.00" in violations[0]
        assert "Balance invariant violated" in caplog.text

    def test_no_entries(self) -> None:
        assert balance_drift(ACCOUNT, []) == Decimal("15.00")
