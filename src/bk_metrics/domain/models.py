"""Result types for the metrics aggregator — plain dataclasses."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum


class Period(str, Enum):
    ONE_DAY = "1D"
    ONE_WEEK = "1W"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    ONE_YEAR = "1Y"


class CategoryField(str, Enum):
    MODALITY = "modality"
    MARKET = "market"
    SITE = "site"


@dataclass
class DashboardMetrics:
    current_bankroll: Decimal
    total_pnl: Decimal
    roi: Decimal
    growth: Decimal
    win_rate: Decimal
    total_entries: int
    wins: int
    losses: int
    avg_odd: Decimal
    avg_stake: Decimal
    total_staked: Decimal


@dataclass
class BankrollPoint:
    date: date
    value: Decimal
    change: Decimal


@dataclass
class DailyPnLPoint:
    date: date
    pnl: Decimal
    entries: int


@dataclass
class MonthlyStats:
    month: str  # YYYY-MM
    entries: int
    wins: int
    losses: int
    cashouts: int
    voids: int
    avg_odd: Decimal
    avg_stake: Decimal
    total_staked: Decimal
    pnl: Decimal
    roi: Decimal
    bankroll: Decimal


@dataclass
class Streaks:
    longest_win: int = 0
    longest_loss: int = 0


@dataclass
class CategoryStats:
    name: str
    entries: int
    wins: int
    losses: int
    volume: Decimal
    profit: Decimal
    win_rate: Decimal
    roi: Decimal


@dataclass
class MonthSummary:
    total_profit: Decimal
    days_with_bets: int
    positive_days: int
    negative_days: int


@dataclass
class AdvancedMetrics:
    win_rate: Decimal
    avg_profit_per_entry: Decimal
    win_loss_ratio: Decimal
    total_entries: int
    longest_win_streak: int
    longest_loss_streak: int
    avg_odd_wins: Decimal


@dataclass
class AccountSummary:
    account_id: str
    name: str
    entries: int
    pnl: Decimal
    initial_balance: Decimal
    current_bankroll: Decimal
    roi: Decimal


class GoalKind(str, Enum):
    ANNUAL = "ANNUAL"
    MONTHLY = "MONTHLY"


@dataclass
class Goal:
    """Profit target for a year, or for one month of it.

    ``account_id`` None is the combined goal shown when more than one account
    is in view.
    """

    year: int
    target: Decimal
    month: int | None = None
    account_id: str | None = None

    @property
    def kind(self) -> GoalKind:
        return GoalKind.ANNUAL if self.month is None else GoalKind.MONTHLY


@dataclass
class GoalProgress:
    kind: GoalKind
    year: int
    month: int | None
    current: Decimal
    target: Decimal | None
    percentage: Decimal
    has_goal: bool
    achieved: bool
