"""Metrics aggregator — pure functions over a selection-restricted entry list.

Nothing here touches the ledger store: callers pass ``LedgerStore.snapshot()``
copies, so a computation never observes a collection mid-mutation.

Money results are quantized to cents; percentages and averages to 2 places.
Win rate counts decided results only (Win and Loss).
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar

from dateutil.relativedelta import relativedelta

from src.bk_common.enums import EntryResult
from src.bk_common.money import ZERO, to_money
from src.bk_ledger.domain.models import Account, Entry
from src.bk_metrics.domain.models import (
    AccountSummary,
    AdvancedMetrics,
    BankrollPoint,
    CategoryField,
    CategoryStats,
    DailyPnLPoint,
    DashboardMetrics,
    Goal,
    GoalKind,
    GoalProgress,
    MonthlyStats,
    MonthSummary,
    Period,
    Streaks,
)

OTHER_CATEGORY = "Other"

_HUNDRED = Decimal(100)
_FULL_GOAL = Decimal("100.00")
_TWO_PLACES = Decimal("0.01")

_PERIOD_DELTAS = {
    Period.ONE_DAY: relativedelta(days=1),
    Period.ONE_WEEK: relativedelta(weeks=1),
    Period.ONE_MONTH: relativedelta(months=1),
    Period.THREE_MONTHS: relativedelta(months=3),
    Period.SIX_MONTHS: relativedelta(months=6),
    Period.ONE_YEAR: relativedelta(years=1),
}

P = TypeVar("P", BankrollPoint, DailyPnLPoint)


def _round2(value: Decimal) -> Decimal:
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def _ratio(num: Decimal | int, den: Decimal | int) -> Decimal:
    if not den:
        return ZERO
    return _round2(Decimal(num) / Decimal(den))


def _percent(num: Decimal | int, den: Decimal | int) -> Decimal:
    if not den:
        return ZERO
    return _round2(Decimal(num) / Decimal(den) * _HUNDRED)


def _count(entries: Iterable[Entry], result: EntryResult) -> int:
    return sum(1 for e in entries if e.result == result)


def _sum_profit(entries: Iterable[Entry]) -> Decimal:
    return sum((e.profit for e in entries), ZERO)


def _sum_stake(entries: Iterable[Entry]) -> Decimal:
    return sum((e.stake for e in entries), ZERO)


def _mean_odd(entries: Sequence[Entry]) -> Decimal:
    return _ratio(sum((e.odd for e in entries), Decimal(0)), len(entries))


def _by_created_day(entries: Iterable[Entry]) -> dict[date, list[Entry]]:
    days: dict[date, list[Entry]] = defaultdict(list)
    for e in entries:
        days[e.created_date].append(e)
    return dict(sorted(days.items()))


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def dashboard_metrics(
    entries: Sequence[Entry],
    initial_balance: Decimal,
    current_balance: Decimal,
) -> DashboardMetrics:
    wins = _count(entries, EntryResult.WIN)
    losses = _count(entries, EntryResult.LOSS)
    total_pnl = to_money(_sum_profit(entries))
    total_staked = to_money(_sum_stake(entries))
    return DashboardMetrics(
        current_bankroll=to_money(current_balance),
        total_pnl=total_pnl,
        roi=_percent(total_pnl, total_staked),
        growth=_percent(total_pnl, initial_balance) if initial_balance > 0 else ZERO,
        win_rate=_percent(wins, wins + losses),
        total_entries=len(entries),
        wins=wins,
        losses=losses,
        avg_odd=_mean_odd(entries),
        avg_stake=_ratio(total_staked, len(entries)),
        total_staked=total_staked,
    )


def bankroll_history(
    entries: Iterable[Entry],
    starting_balance: Decimal = ZERO,
) -> list[BankrollPoint]:
    """Cumulative balance per created-date day, ascending."""
    points: list[BankrollPoint] = []
    value = to_money(starting_balance)
    for day, group in _by_created_day(entries).items():
        change = to_money(_sum_profit(group))
        value += change
        points.append(BankrollPoint(date=day, value=value, change=change))
    return points


def daily_pnl(entries: Iterable[Entry]) -> list[DailyPnLPoint]:
    return [
        DailyPnLPoint(date=day, pnl=to_money(_sum_profit(group)), entries=len(group))
        for day, group in _by_created_day(entries).items()
    ]


def monthly_stats(
    entries: Iterable[Entry],
    starting_balance: Decimal = ZERO,
) -> list[MonthlyStats]:
    months: dict[str, list[Entry]] = defaultdict(list)
    for e in entries:
        months[e.created_date.strftime("%Y-%m")].append(e)

    stats: list[MonthlyStats] = []
    bankroll = to_money(starting_balance)
    for month in sorted(months):
        group = months[month]
        pnl = to_money(_sum_profit(group))
        staked = to_money(_sum_stake(group))
        bankroll += pnl
        stats.append(MonthlyStats(
            month=month,
            entries=len(group),
            wins=_count(group, EntryResult.WIN),
            losses=_count(group, EntryResult.LOSS),
            cashouts=_count(group, EntryResult.CASH_OUT),
            voids=_count(group, EntryResult.VOID),
            avg_odd=_mean_odd(group),
            avg_stake=_ratio(staked, len(group)),
            total_staked=staked,
            pnl=pnl,
            roi=_percent(pnl, staked),
            bankroll=bankroll,
        ))
    return stats


def recent_entries(entries: Iterable[Entry], n: int = 5) -> list[Entry]:
    ordered = sorted(
        entries,
        key=lambda e: (e.created_date, e.created_at.timestamp() if e.created_at else 0.0),
        reverse=True,
    )
    return ordered[:n]


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


def streaks(entries: Iterable[Entry]) -> Streaks:
    """Longest Win / Loss runs in event-date order.

    Only decided results take part; Pending, Void, CashOut and half results
    neither extend nor break a run. Ties on date keep input order.
    """
    decided = sorted(
        (e for e in entries if e.result.is_decided),
        key=lambda e: e.last_event_date,
    )
    out = Streaks()
    current_win = current_loss = 0
    for e in decided:
        if e.result == EntryResult.WIN:
            current_win += 1
            current_loss = 0
            out.longest_win = max(out.longest_win, current_win)
        else:
            current_loss += 1
            current_win = 0
            out.longest_loss = max(out.longest_loss, current_loss)
    return out


def _labels(entry: Entry, category: CategoryField) -> list[str]:
    if category == CategoryField.SITE:
        return [entry.site.strip() or OTHER_CATEGORY]
    return [getattr(leg, category.value).strip() or OTHER_CATEGORY for leg in entry.legs]


def category_breakdown(
    entries: Iterable[Entry],
    category: CategoryField | str,
    limit: int | None = None,
) -> list[CategoryStats]:
    """Per-label stats, best profit first.

    A multi-leg entry splits its stake and profit evenly across its legs and
    attributes each share to that leg's label. Site is a per-entry label.
    """
    category = CategoryField(category)
    acc: dict[str, dict] = {}
    for e in entries:
        labels = _labels(e, category)
        share = len(labels)
        for name in labels:
            bucket = acc.setdefault(
                name, {"entries": 0, "wins": 0, "losses": 0, "volume": Decimal(0), "profit": Decimal(0)}
            )
            bucket["entries"] += 1
            if e.result == EntryResult.WIN:
                bucket["wins"] += 1
            elif e.result == EntryResult.LOSS:
                bucket["losses"] += 1
            bucket["volume"] += e.stake / share
            bucket["profit"] += e.profit / share

    stats = [
        CategoryStats(
            name=name,
            entries=b["entries"],
            wins=b["wins"],
            losses=b["losses"],
            volume=to_money(b["volume"]),
            profit=to_money(b["profit"]),
            win_rate=_percent(b["wins"], b["wins"] + b["losses"]),
            roi=_percent(b["profit"], b["volume"]),
        )
        for name, b in acc.items()
    ]
    stats.sort(key=lambda s: s.profit, reverse=True)
    return stats[:limit] if limit is not None else stats


def month_summary(entries: Iterable[Entry], year: int, month: int) -> MonthSummary:
    in_month = [
        e for e in entries
        if e.created_date.year == year and e.created_date.month == month
    ]
    days = daily_pnl(in_month)
    return MonthSummary(
        total_profit=to_money(_sum_profit(in_month)),
        days_with_bets=len(days),
        positive_days=sum(1 for d in days if d.pnl > 0),
        negative_days=sum(1 for d in days if d.pnl < 0),
    )


def advanced_metrics(entries: Sequence[Entry]) -> AdvancedMetrics:
    wins = [e for e in entries if e.result == EntryResult.WIN]
    losses = _count(entries, EntryResult.LOSS)
    runs = streaks(entries)
    return AdvancedMetrics(
        win_rate=_percent(len(wins), len(wins) + losses),
        avg_profit_per_entry=_ratio(_sum_profit(entries), len(entries)),
        # With no losses the ratio degrades to the win count
        win_loss_ratio=_ratio(len(wins), losses) if losses else Decimal(len(wins)),
        total_entries=len(entries),
        longest_win_streak=runs.longest_win,
        longest_loss_streak=runs.longest_loss,
        avg_odd_wins=_mean_odd(wins),
    )


def account_summaries(
    accounts: Iterable[Account],
    entries: Iterable[Entry],
) -> list[AccountSummary]:
    owned: dict[str, list[Entry]] = defaultdict(list)
    for e in entries:
        owned[e.account_id].append(e)

    summaries = []
    for account in accounts:
        group = owned.get(account.id, [])
        pnl = to_money(_sum_profit(group))
        summaries.append(AccountSummary(
            account_id=account.id,
            name=account.name,
            entries=len(group),
            pnl=pnl,
            initial_balance=account.initial_balance,
            current_bankroll=account.balance,
            roi=_percent(pnl, account.initial_balance) if account.initial_balance > 0 else ZERO,
        ))
    return summaries


def filter_by_period(points: Iterable[P], period: Period | str, today: date) -> list[P]:
    """Keep series points strictly after ``today`` minus the period."""
    cutoff = today - _PERIOD_DELTAS[Period(period)]
    return [p for p in points if p.date > cutoff]


def goal_progress(
    entries: Iterable[Entry],
    goals: Iterable[Goal],
    year: int,
    month: int | None = None,
) -> GoalProgress:
    """Profit of ``year`` (or one month of it) against the matching goal.

    The percentage is capped at 100 but not floored, so a losing period shows
    negative progress. Without a goal it is 0.
    """
    in_period = [
        e for e in entries
        if e.created_date.year == year and (month is None or e.created_date.month == month)
    ]
    current = to_money(_sum_profit(in_period))
    goal = next((g for g in goals if g.year == year and g.month == month), None)
    target = goal.target if goal is not None else None
    percentage = ZERO
    if target is not None and target > 0:
        percentage = min(_percent(current, target), _FULL_GOAL)
    return GoalProgress(
        kind=GoalKind.ANNUAL if month is None else GoalKind.MONTHLY,
        year=year,
        month=month,
        current=current,
        target=target,
        percentage=percentage,
        has_goal=goal is not None,
        achieved=percentage >= _FULL_GOAL,
    )
