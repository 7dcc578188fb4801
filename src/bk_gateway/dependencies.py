"""FastAPI dependencies shared by every router."""

from datetime import date

from fastapi import Query, Request

from src.bk_common.enums import EntryResult
from src.bk_csv.filters import EntryFilter, SortKey
from src.bk_ledger.application.service import LedgerStore
from src.bk_metrics.domain.repository import GoalRepositoryProtocol


def get_ledger_store(request: Request) -> LedgerStore:
    """The process-wide store created in the app lifespan."""
    return request.app.state.ledger_store


def get_entry_filter(
    date_from: date | None = Query(None, description="Created date lower bound (inclusive)"),
    date_to: date | None = Query(None, description="Created date upper bound (inclusive)"),
    result: EntryResult | None = Query(None),
    modality: str | None = Query(None),
    market: str | None = Query(None),
    site: list[str] | None = Query(None, description="Repeat to accept several sites"),
    search: str | None = Query(None, max_length=200),
    sort_by: SortKey = Query(SortKey.CREATED_DATE),
    order: str = Query("desc", pattern="^(asc|desc)$"),
) -> EntryFilter:
    return EntryFilter(
        date_from=date_from,
        date_to=date_to,
        result=result,
        modality=modality,
        market=market,
        sites=set(site or []),
        search=search,
        sort_by=sort_by,
        descending=order == "desc",
    )


def get_goal_repository(request: Request) -> GoalRepositoryProtocol:
    return request.app.state.goal_repository
