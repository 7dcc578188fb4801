"""Tests for bk_ledger domain models: legs, profit and wager validation."""

from datetime import date
from decimal import Decimal

import pytest

from src.bk_common.enums import EntryResult, Timing
from src.bk_common.errors import ValidationError
from src.bk_ledger.domain.models import (
    Account,
    Entry,
    Leg,
    LedgerSnapshot,
    calculate_profit,
    entry_fields,
    parse_timing,
    split_legs,
    validate_wager,
)


class TestSplitLegs:
    def test_single_leg(self) -> None:
        legs = split_legs("04/03/2025", "Soccer", "A x B", "ML", "A", "Live")
        assert legs == [Leg(date(2025, 3, 4), "Soccer", "A x B", "ML", "A", Timing.LIVE)]

    def test_multi_leg_segments_line_up(self) -> None:
        legs = split_legs(
            "2025-03-04|2025-03-05", "Soccer|Basketball", "A x B|C x D", "ML|Handicap",
            "A|D", "PRE|LIVE",
        )
        assert [leg.modality for leg in legs] == ["Soccer", "Basketball"]
        assert legs[1].event_date == date(2025, 3, 5)
        assert legs[1].timing == Timing.LIVE

    def test_single_segment_applies_to_every_leg(self) -> None:
        legs = split_legs("2025-03-04", "Soccer|Tennis", timing="")
        assert [leg.event_date for leg in legs] == [date(2025, 3, 4)] * 2
        assert all(leg.timing == Timing.PRE for leg in legs)

    def test_mismatched_segment_counts(self) -> None:
        with pytest.raises(ValidationError, match="legs"):
            split_legs("2025-03-04|2025-03-05", "A|B|C")

    def test_bad_leg_date(self) -> None:
        with pytest.raises(ValidationError):
            split_legs("2025-03-04|31/13/2025", "A|B")


class TestParseTiming:
    @pytest.mark.parametrize("raw", ["", None, "pre", "Pré", "PRE-LIVE"])
    def test_pre(self, raw: str | None) -> None:
        assert parse_timing(raw) == Timing.PRE

    @pytest.mark.parametrize("raw", ["live", "Ao Vivo"])
    def test_live(self, raw: str) -> None:
        assert parse_timing(raw) == Timing.LIVE

    def test_unknown(self) -> None:
        with pytest.raises(ValidationError):
            parse_timing("halftime")


class TestCalculateProfit:
    def test_win(self) -> None:
        assert calculate_profit(EntryResult.WIN, Decimal("1.85"), Decimal("100")) == Decimal("85.00")

    def test_half_win(self) -> None:
        assert calculate_profit(EntryResult.HALF_WIN, Decimal("2"), Decimal("50")) == Decimal("25.00")

    def test_loss(self) -> None:
        assert calculate_profit(EntryResult.LOSS, Decimal("3"), Decimal("40")) == Decimal("-40.00")

    def test_half_loss(self) -> None:
        assert calculate_profit(EntryResult.HALF_LOSS, Decimal("3"), Decimal("40")) == Decimal("-20.00")

    def test_cash_out(self) -> None:
        profit = calculate_profit(EntryResult.CASH_OUT, Decimal("3"), Decimal("40"), Decimal("55.5"))
        assert profit == Decimal("15.50")

    def test_cash_out_without_value(self) -> None:
        assert calculate_profit(EntryResult.CASH_OUT, Decimal("3"), Decimal("40")) == Decimal("0.00")

    @pytest.mark.parametrize("result", [EntryResult.VOID, EntryResult.PENDING])
    def test_no_profit(self, result: EntryResult) -> None:
        assert calculate_profit(result, Decimal("3"), Decimal("40")) == Decimal("0.00")

    def test_oversized_amounts_are_validation_errors(self) -> None:
        with pytest.raises(ValidationError, match="out of range"):
            calculate_profit(EntryResult.WIN, Decimal("2"), Decimal("1e30"))
        with pytest.raises(ValidationError):
            calculate_profit(EntryResult.LOSS, Decimal("2"), Decimal("1" + "0" * 28))


class TestValidateWager:
    def test_valid(self) -> None:
        validate_wager(Decimal("1"), Decimal("0"), [Leg(date(2025, 1, 1))])

    def test_no_legs(self) -> None:
        with pytest.raises(ValidationError):
            validate_wager(Decimal("2"), Decimal("10"), [])

    def test_odd_below_one(self) -> None:
        with pytest.raises(ValidationError, match="Odd"):
            validate_wager(Decimal("0.99"), Decimal("10"), [Leg(date(2025, 1, 1))])

    def test_negative_stake(self) -> None:
        with pytest.raises(ValidationError, match="Stake"):
            validate_wager(Decimal("2"), Decimal("-1"), [Leg(date(2025, 1, 1))])


class TestEntryViews:
    def _entry(self) -> Entry:
        return Entry(
            id="e1",
            account_id="a1",
            created_date=date(2025, 3, 1),
            legs=[
                Leg(date(2025, 3, 4), "Soccer", "A x B", "ML", "A"),
                Leg(date(2025, 3, 2), "Basketball", "C x D", "Handicap", "D", Timing.LIVE),
            ],
            odd=Decimal("3.2"),
            stake=Decimal("50.00"),
            result=EntryResult.WIN,
            profit=Decimal("110.00"),
        )

    def test_pipe_joined_views(self) -> None:
        entry = self._entry()
        assert entry.num_legs == 2
        assert entry.is_multi_leg
        assert entry.modality == "Soccer|Basketball"
        assert entry.event_date_text == "2025-03-04|2025-03-02"
        assert entry.timing_text == "PRE|LIVE"
        assert entry.last_event_date == date(2025, 3, 4)

    def test_entry_fields_round_trip_through_split_legs(self) -> None:
        entry = self._entry()
        fields = entry_fields(entry)
        assert fields["result"] == "WIN"
        legs = split_legs(
            fields["event_date"], fields["modality"], fields["description"],
            fields["market"], fields["selection_text"], fields["timing"],
        )
        assert legs == entry.legs


class TestSnapshot:
    def test_totals(self) -> None:
        snap = LedgerSnapshot(accounts=[
            Account("a1", "Main", Decimal("150.00"), Decimal("100.00")),
            Account("a2", "Side", Decimal("40.00"), Decimal("50.00")),
        ])
        assert snap.total_balance == Decimal("190.00")
        assert snap.total_initial_balance == Decimal("150.00")
        assert snap.accounts[1].pnl == Decimal("-10.00")
