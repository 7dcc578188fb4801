"""Domain models for bk_ledger — pure dataclasses, no SQLAlchemy dependency.

A multi-leg (combined) wager is modelled as ``Entry.legs``. At the persistence
and CSV boundaries the per-leg fields travel as pipe-joined text
(``"Soccer|Basketball"``); ``split_legs`` / the ``*_text`` properties convert.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from src.bk_common.dates import canonical_date_text, normalize_date
from src.bk_common.enums import EntryResult, Timing
from src.bk_common.errors import ValidationError
from src.bk_common.money import ZERO, to_money

LEG_SEPARATOR = "|"

_TIMING_ALIASES = {
    "PRE": Timing.PRE,
    "PRÉ": Timing.PRE,
    "PRE-LIVE": Timing.PRE,
    "PRÉ-JOGO": Timing.PRE,
    "LIVE": Timing.LIVE,
    "AO VIVO": Timing.LIVE,
}


@dataclass
class Account:
    id: str
    name: str
    balance: Decimal
    initial_balance: Decimal
    created_at: datetime | None = None

    @property
    def pnl(self) -> Decimal:
        return self.balance - self.initial_balance


@dataclass(frozen=True)
class Leg:
    event_date: date
    modality: str = ""
    description: str = ""
    market: str = ""
    selection: str = ""
    timing: Timing = Timing.PRE


@dataclass
class EntryDraft:
    """An entry not yet persisted: no id, no owning account."""

    created_date: date | str
    legs: list[Leg]
    odd: Decimal
    stake: Decimal
    result: EntryResult
    profit: Decimal
    site: str = ""


@dataclass
class Entry:
    id: str
    account_id: str
    created_date: date
    legs: list[Leg]
    odd: Decimal
    stake: Decimal
    result: EntryResult
    profit: Decimal
    site: str = ""
    created_at: datetime | None = None

    @property
    def num_legs(self) -> int:
        return len(self.legs)

    @property
    def is_multi_leg(self) -> bool:
        return len(self.legs) > 1

    @property
    def last_event_date(self) -> date:
        return max(leg.event_date for leg in self.legs) if self.legs else self.created_date

    # Pipe-joined views used at the persistence / CSV boundary

    @property
    def event_date_text(self) -> str:
        return LEG_SEPARATOR.join(canonical_date_text(leg.event_date) for leg in self.legs)

    @property
    def modality(self) -> str:
        return LEG_SEPARATOR.join(leg.modality for leg in self.legs)

    @property
    def description(self) -> str:
        return LEG_SEPARATOR.join(leg.description for leg in self.legs)

    @property
    def market(self) -> str:
        return LEG_SEPARATOR.join(leg.market for leg in self.legs)

    @property
    def selection_text(self) -> str:
        return LEG_SEPARATOR.join(leg.selection for leg in self.legs)

    @property
    def timing_text(self) -> str:
        return LEG_SEPARATOR.join(leg.timing.value for leg in self.legs)


@dataclass
class LedgerSnapshot:
    """Point-in-time copy handed to the metrics aggregator."""

    accounts: list[Account] = field(default_factory=list)
    entries: list[Entry] = field(default_factory=list)

    @property
    def total_balance(self) -> Decimal:
        return sum((a.balance for a in self.accounts), ZERO)

    @property
    def total_initial_balance(self) -> Decimal:
        return sum((a.initial_balance for a in self.accounts), ZERO)


def parse_timing(raw: str | None) -> Timing:
    s = (raw or "").strip().upper()
    if not s:
        return Timing.PRE
    try:
        return _TIMING_ALIASES[s]
    except KeyError:
        raise ValidationError(f"Unknown timing: {raw!r}") from None


def _segments(text: str | None) -> list[str]:
    return [part.strip() for part in (text or "").split(LEG_SEPARATOR)]


def split_legs(
    event_date: str,
    modality: str = "",
    description: str = "",
    market: str = "",
    selection: str = "",
    timing: str = "",
) -> list[Leg]:
    """Build legs from pipe-joined fields.

    Fields with more than one segment must all agree on the leg count; a
    field with a single segment applies to every leg.
    """
    fields = {
        "event_date": _segments(event_date),
        "modality": _segments(modality),
        "description": _segments(description),
        "market": _segments(market),
        "selection": _segments(selection),
        "timing": _segments(timing),
    }
    num_legs = max(len(parts) for parts in fields.values())
    for name, parts in fields.items():
        if len(parts) not in (1, num_legs):
            raise ValidationError(
                f"Field {name!r} has {len(parts)} legs, expected {num_legs}"
            )

    def at(name: str, i: int) -> str:
        parts = fields[name]
        return parts[i] if len(parts) > 1 else parts[0]

    return [
        Leg(
            event_date=normalize_date(at("event_date", i)),
            modality=at("modality", i),
            description=at("description", i),
            market=at("market", i),
            selection=at("selection", i),
            timing=parse_timing(at("timing", i)),
        )
        for i in range(num_legs)
    ]


def calculate_profit(
    result: EntryResult,
    odd: Decimal,
    stake: Decimal,
    cashout_value: Decimal | None = None,
) -> Decimal:
    """Profit a caller stores on the entry for a given outcome.

    Raises ValidationError when the amounts do not fit a money value.
    """
    try:
        if result == EntryResult.WIN:
            return to_money(stake * (odd - 1))
        if result == EntryResult.HALF_WIN:
            return to_money(stake * (odd - 1) / 2)
        if result == EntryResult.LOSS:
            return to_money(-stake)
        if result == EntryResult.HALF_LOSS:
            return to_money(-stake / 2)
        if result == EntryResult.CASH_OUT:
            return to_money(cashout_value - stake) if cashout_value is not None else ZERO
    except (ArithmeticError, ValueError):
        raise ValidationError(f"Profit out of range for stake {stake} at odd {odd}") from None
    return ZERO


def validate_wager(odd: Decimal, stake: Decimal, legs: list[Leg]) -> None:
    """Basic rejection rules shared by manual entry and import."""
    if not legs:
        raise ValidationError("Entry must have at least one leg")
    if odd < 1:
        raise ValidationError(f"Odd must be >= 1, got {odd}")
    if stake < 0:
        raise ValidationError(f"Stake must be >= 0, got {stake}")


def entry_fields(entry: Entry | EntryDraft) -> dict[str, object]:
    """Column values for a full entry write; legs become pipe-joined text."""
    legs = entry.legs
    return {
        "created_date": entry.created_date,
        "event_date": LEG_SEPARATOR.join(leg.event_date.isoformat() for leg in legs),
        "modality": LEG_SEPARATOR.join(leg.modality for leg in legs),
        "description": LEG_SEPARATOR.join(leg.description for leg in legs),
        "market": LEG_SEPARATOR.join(leg.market for leg in legs),
        "selection_text": LEG_SEPARATOR.join(leg.selection for leg in legs),
        "timing": LEG_SEPARATOR.join(leg.timing.value for leg in legs),
        "odd": entry.odd,
        "stake": entry.stake,
        "result": entry.result.value,
        "profit": entry.profit,
        "site": entry.site,
    }
