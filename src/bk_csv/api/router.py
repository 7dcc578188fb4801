"""bk_csv REST API — bulk import and filtered export of entries."""

import logging
from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from src.bk_common.dates import utc_now
from src.bk_common.errors import PersistenceError
from src.bk_common.response import ApiResponse, success_response
from src.bk_csv.application.schemas import ImportRequest, ImportResponse
from src.bk_csv.codec import export_filename, parse_entries_csv, serialize_entries_csv
from src.bk_csv.filters import EntryFilter
from src.bk_gateway.dependencies import get_entry_filter, get_ledger_store
from src.bk_ledger.application.service import LedgerStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/csv", tags=["csv"])

Store = Annotated[LedgerStore, Depends(get_ledger_store)]


@router.post("/import")
async def import_entries(body: ImportRequest, store: Store, request: Request) -> ApiResponse:
    """Parse the CSV, persist accepted rows, report the rejected ones.

    Rejected rows never abort the import. A store failure part-way through
    surfaces as PersistenceError with the number of rows that made it and
    the rejection report.
    """
    result = parse_entries_csv(body.content)
    persisted = []
    if result.accepted:
        try:
            persisted = await store.add_entries(result.accepted, account_id=body.account_id)
        except PersistenceError as exc:
            logger.warning(
                "CSV import stopped after %d of %d rows: %s", exc.succeeded, exc.total, result.summary()
            )
            raise PersistenceError(
                exc.message,
                succeeded=exc.succeeded,
                total=exc.total,
                report={
                    "rejected": [asdict(r) for r in result.rejected],
                    "summary": result.summary(),
                },
            ) from exc
    logger.info("CSV import: %s", result.summary())
    return success_response(ImportResponse.from_result(result, persisted).model_dump(), request)


@router.get("/export")
async def export_entries(
    store: Store,
    entry_filter: Annotated[EntryFilter, Depends(get_entry_filter)],
) -> Response:
    entries = entry_filter.apply(store.entries_for_selection())
    selected = store.selected_accounts()
    account_name = selected[0].name if len(selected) == 1 else None
    filename = export_filename(account_name, utc_now().date())
    return Response(
        content=serialize_entries_csv(entries).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
