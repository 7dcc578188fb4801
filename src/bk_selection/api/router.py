"""bk_selection REST API — which account(s) the ledger views operate on."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from src.bk_common.enums import ViewMode
from src.bk_common.response import ApiResponse, success_response
from src.bk_gateway.dependencies import get_ledger_store
from src.bk_ledger.application.service import LedgerStore

router = APIRouter(prefix="/selection", tags=["selection"])

Store = Annotated[LedgerStore, Depends(get_ledger_store)]


class SelectionResponse(BaseModel):
    view_mode: ViewMode
    account_ids: list[str]
    target_account_id: str | None

    @classmethod
    def from_store(cls, store: LedgerStore) -> "SelectionResponse":
        active = sorted(store.selected_account_ids())
        return cls(
            view_mode=ViewMode.OVERVIEW if store.is_overview else ViewMode.SPECIFIC,
            account_ids=active,
            target_account_id=active[0] if len(active) == 1 else None,
        )


@router.get("")
async def get_selection(store: Store, request: Request) -> ApiResponse:
    return success_response(SelectionResponse.from_store(store).model_dump(), request)


@router.post("/overview")
async def enter_overview(store: Store, request: Request) -> ApiResponse:
    await store.enter_overview()
    return success_response(SelectionResponse.from_store(store).model_dump(), request)


@router.post("/select/{account_id}")
async def select_single(account_id: str, store: Store, request: Request) -> ApiResponse:
    await store.select_single(account_id)
    return success_response(SelectionResponse.from_store(store).model_dump(), request)


@router.post("/toggle/{account_id}")
async def toggle(account_id: str, store: Store, request: Request) -> ApiResponse:
    await store.toggle(account_id)
    return success_response(SelectionResponse.from_store(store).model_dump(), request)
