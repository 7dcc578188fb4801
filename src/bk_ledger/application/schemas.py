"""Pydantic schemas for the accounts and entries API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from src.bk_common.dates import normalize_date
from src.bk_common.enums import EntryResult, Timing
from src.bk_common.money import ZERO, money_to_display
from src.bk_ledger.domain.models import (
    Account,
    Entry,
    EntryDraft,
    Leg,
    calculate_profit,
)

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AccountCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    initial_balance: Decimal = Field(ZERO, description="Starting bankroll; balance starts equal")


class AccountUpdateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    balance: Decimal
    initial_balance: Decimal


class LegIn(BaseModel):
    event_date: str = Field(..., description="YYYY-MM-DD, DD/MM/YYYY or any parseable date")
    modality: str = ""
    description: str = ""
    market: str = ""
    selection: str = ""
    timing: Timing = Timing.PRE

    def to_leg(self) -> Leg:
        return Leg(
            event_date=normalize_date(self.event_date),
            modality=self.modality.strip(),
            description=self.description.strip(),
            market=self.market.strip(),
            selection=self.selection.strip(),
            timing=self.timing,
        )


class EntryWrite(BaseModel):
    """Full entry body. ``profit`` omitted means: derive it from the result."""

    created_date: str
    legs: list[LegIn] = Field(..., min_length=1)
    odd: Decimal = Field(..., ge=1)
    stake: Decimal = Field(..., ge=0)
    result: EntryResult
    profit: Decimal | None = None
    cashout_value: Decimal | None = Field(None, ge=0)
    site: str = ""

    def resolved_profit(self) -> Decimal:
        if self.profit is not None:
            return self.profit
        return calculate_profit(self.result, self.odd, self.stake, self.cashout_value)


class EntryCreateRequest(EntryWrite):
    account_id: str | None = Field(None, description="Defaults to the single selected account")

    def to_draft(self) -> EntryDraft:
        return EntryDraft(
            created_date=self.created_date,
            legs=[leg.to_leg() for leg in self.legs],
            odd=self.odd,
            stake=self.stake,
            result=self.result,
            profit=self.resolved_profit(),
            site=self.site.strip(),
        )


class EntryUpdateRequest(EntryWrite):
    account_id: str | None = Field(None, description="Move the entry to another account")

    def to_entry(self, current: Entry) -> Entry:
        return Entry(
            id=current.id,
            account_id=self.account_id or current.account_id,
            created_date=normalize_date(self.created_date),
            legs=[leg.to_leg() for leg in self.legs],
            odd=self.odd,
            stake=self.stake,
            result=self.result,
            profit=self.resolved_profit(),
            site=self.site.strip(),
            created_at=current.created_at,
        )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    id: str
    name: str
    balance: Decimal
    balance_display: str
    initial_balance: Decimal
    initial_balance_display: str
    pnl: Decimal
    created_at: str | None

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            name=account.name,
            balance=account.balance,
            balance_display=money_to_display(account.balance),
            initial_balance=account.initial_balance,
            initial_balance_display=money_to_display(account.initial_balance),
            pnl=account.pnl,
            created_at=account.created_at.isoformat() if account.created_at else None,
        )


class LegResponse(BaseModel):
    event_date: str
    modality: str
    description: str
    market: str
    selection: str
    timing: Timing


class EntryResponse(BaseModel):
    id: str
    account_id: str
    created_date: str
    legs: list[LegResponse]
    multi_leg: bool
    odd: Decimal
    stake: Decimal
    result: EntryResult
    profit: Decimal
    profit_display: str
    site: str
    created_at: str | None

    @classmethod
    def from_domain(cls, entry: Entry) -> "EntryResponse":
        return cls(
            id=entry.id,
            account_id=entry.account_id,
            created_date=entry.created_date.isoformat(),
            legs=[
                LegResponse(
                    event_date=leg.event_date.isoformat(),
                    modality=leg.modality,
                    description=leg.description,
                    market=leg.market,
                    selection=leg.selection,
                    timing=leg.timing,
                )
                for leg in entry.legs
            ],
            multi_leg=entry.is_multi_leg,
            odd=entry.odd,
            stake=entry.stake,
            result=entry.result,
            profit=entry.profit,
            profit_display=money_to_display(entry.profit),
            site=entry.site,
            created_at=entry.created_at.isoformat() if entry.created_at else None,
        )


class EntryListResponse(BaseModel):
    items: list[EntryResponse]
    total: int
    filtered: bool
    offset: int
    limit: int
