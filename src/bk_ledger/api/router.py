"""bk_ledger REST API — accounts CRUD and entry mutations."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.bk_common.response import ApiResponse, success_response
from src.bk_csv.filters import EntryFilter
from src.bk_gateway.dependencies import get_entry_filter, get_ledger_store
from src.bk_ledger.application.schemas import (
    AccountCreateRequest,
    AccountResponse,
    AccountUpdateRequest,
    EntryCreateRequest,
    EntryListResponse,
    EntryResponse,
    EntryUpdateRequest,
)
from src.bk_ledger.application.service import LedgerStore

router = APIRouter(tags=["ledger"])

Store = Annotated[LedgerStore, Depends(get_ledger_store)]


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


@router.get("/accounts")
async def list_accounts(store: Store, request: Request) -> ApiResponse:
    data = [AccountResponse.from_domain(a).model_dump() for a in store.accounts]
    return success_response(data, request)


@router.post("/accounts", status_code=201)
async def create_account(body: AccountCreateRequest, store: Store, request: Request) -> ApiResponse:
    account = await store.add_account(body.name, body.initial_balance)
    return success_response(AccountResponse.from_domain(account).model_dump(), request)


@router.get("/accounts/{account_id}")
async def get_account(account_id: str, store: Store, request: Request) -> ApiResponse:
    account = store.get_account(account_id)
    return success_response(AccountResponse.from_domain(account).model_dump(), request)


@router.put("/accounts/{account_id}")
async def edit_account(
    account_id: str,
    body: AccountUpdateRequest,
    store: Store,
    request: Request,
) -> ApiResponse:
    account = await store.edit_account(
        account_id, body.name, body.balance, body.initial_balance
    )
    return success_response(AccountResponse.from_domain(account).model_dump(), request)


@router.delete("/accounts/{account_id}")
async def delete_account(account_id: str, store: Store, request: Request) -> ApiResponse:
    await store.delete_account(account_id)
    return success_response({"id": account_id}, request)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


@router.get("/entries")
async def list_entries(
    store: Store,
    request: Request,
    entry_filter: Annotated[EntryFilter, Depends(get_entry_filter)],
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
) -> ApiResponse:
    """Entries of the selected account(s), filtered and sorted."""
    matched = entry_filter.apply(store.entries_for_selection())
    page = matched[offset:offset + limit]
    data = EntryListResponse(
        items=[EntryResponse.from_domain(e) for e in page],
        total=len(matched),
        filtered=entry_filter.is_active,
        offset=offset,
        limit=limit,
    )
    return success_response(data.model_dump(), request)


@router.post("/entries", status_code=201)
async def create_entry(body: EntryCreateRequest, store: Store, request: Request) -> ApiResponse:
    created = await store.add_entries([body.to_draft()], account_id=body.account_id)
    return success_response(EntryResponse.from_domain(created[0]).model_dump(), request)


@router.get("/entries/{entry_id}")
async def get_entry(entry_id: str, store: Store, request: Request) -> ApiResponse:
    entry = store.get_entry(entry_id)
    return success_response(EntryResponse.from_domain(entry).model_dump(), request)


@router.put("/entries/{entry_id}")
async def update_entry(
    entry_id: str,
    body: EntryUpdateRequest,
    store: Store,
    request: Request,
) -> ApiResponse:
    current = store.get_entry(entry_id)
    updated = await store.update_entry(body.to_entry(current))
    return success_response(EntryResponse.from_domain(updated).model_dump(), request)


@router.delete("/entries/{entry_id}")
async def delete_entry(entry_id: str, store: Store, request: Request) -> ApiResponse:
    await store.delete_entry(entry_id)
    return success_response({"id": entry_id}, request)
