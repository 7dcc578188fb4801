"""bk_metrics REST API — dashboard, statistics and goal views over the selection."""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bk_common.dates import utc_now
from src.bk_common.money import to_money
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.dependencies import get_goal_repository, get_ledger_store
from src.bk_ledger.application.schemas import EntryResponse
from src.bk_ledger.application.service import LedgerStore
from src.bk_metrics.application.schemas import GoalUpsertRequest
from src.bk_metrics.domain import aggregator
from src.bk_metrics.domain.models import CategoryField, Goal, Period
from src.bk_metrics.domain.repository import GoalRepositoryProtocol

router = APIRouter(prefix="/metrics", tags=["metrics"])

Store = Annotated[LedgerStore, Depends(get_ledger_store)]
Goals = Annotated[GoalRepositoryProtocol, Depends(get_goal_repository)]

TOP_CATEGORIES = 6


@router.get("/dashboard")
async def dashboard(
    store: Store,
    request: Request,
    period: Period | None = Query(None, description="Trim the chart series to a recent window"),
    recent: int = Query(5, ge=1, le=50),
) -> ApiResponse:
    snap = store.snapshot()
    history = aggregator.bankroll_history(snap.entries, snap.total_initial_balance)
    daily = aggregator.daily_pnl(snap.entries)
    if period is not None:
        today = utc_now().date()
        history = aggregator.filter_by_period(history, period, today)
        daily = aggregator.filter_by_period(daily, period, today)

    data = {
        "metrics": asdict(aggregator.dashboard_metrics(
            snap.entries, snap.total_initial_balance, snap.total_balance
        )),
        "bankroll_history": [asdict(p) for p in history],
        "daily_pnl": [asdict(p) for p in daily],
        "monthly_stats": [
            asdict(m) for m in aggregator.monthly_stats(snap.entries, snap.total_initial_balance)
        ],
        "recent_entries": [
            EntryResponse.from_domain(e).model_dump()
            for e in aggregator.recent_entries(snap.entries, recent)
        ],
        "has_data": bool(snap.entries),
    }
    return success_response(data, request)


@router.get("/statistics")
async def statistics(
    store: Store,
    request: Request,
    year: int | None = Query(None, ge=1900, le=2200),
    month: int | None = Query(None, ge=1, le=12),
) -> ApiResponse:
    """Month summary (current month by default), breakdowns and streaks."""
    entries = store.entries_for_selection()
    today = utc_now().date()
    data = {
        "month_summary": asdict(aggregator.month_summary(
            entries, year or today.year, month or today.month
        )),
        "modality_stats": [
            asdict(s)
            for s in aggregator.category_breakdown(entries, CategoryField.MODALITY, TOP_CATEGORIES)
        ],
        "market_stats": [
            asdict(s)
            for s in aggregator.category_breakdown(entries, CategoryField.MARKET, TOP_CATEGORIES)
        ],
        "site_stats": [
            asdict(s) for s in aggregator.category_breakdown(entries, CategoryField.SITE)
        ],
        "advanced_metrics": asdict(aggregator.advanced_metrics(entries)),
        "has_data": bool(entries),
    }
    return success_response(data, request)


@router.get("/accounts")
async def accounts(store: Store, request: Request) -> ApiResponse:
    summaries = aggregator.account_summaries(store.accounts, store.all_entries())
    return success_response([asdict(s) for s in summaries], request)


def _goal_scope(store: LedgerStore) -> str | None:
    """Goals belong to the single account in view, else to the combined view."""
    active = sorted(store.selected_account_ids())
    return active[0] if len(active) == 1 else None


@router.get("/goals")
async def goals(
    store: Store,
    goal_repo: Goals,
    request: Request,
    year: int | None = Query(None, ge=1900, le=2200),
) -> ApiResponse:
    """Annual and per-month progress towards the profit goals of ``year``."""
    year = year or utc_now().year
    scope = _goal_scope(store)
    stored = await goal_repo.list_goals(scope, year)
    entries = store.entries_for_selection()
    data = {
        "year": year,
        "account_id": scope,
        "annual": asdict(aggregator.goal_progress(entries, stored, year)),
        "monthly": [
            asdict(aggregator.goal_progress(entries, stored, year, month))
            for month in range(1, 13)
        ],
    }
    return success_response(data, request)


@router.put("/goals")
async def set_goal(
    body: GoalUpsertRequest,
    store: Store,
    goal_repo: Goals,
    request: Request,
) -> ApiResponse:
    goal = await goal_repo.upsert_goal(Goal(
        year=body.year,
        target=to_money(body.target),
        month=body.month,
        account_id=_goal_scope(store),
    ))
    progress = aggregator.goal_progress(
        store.entries_for_selection(), [goal], goal.year, goal.month
    )
    return success_response(asdict(progress), request)
