"""Pydantic schemas for CSV import / export."""

from pydantic import BaseModel, Field

from src.bk_csv.codec import ImportResult
from src.bk_ledger.application.schemas import EntryResponse
from src.bk_ledger.domain.models import Entry


class ImportRequest(BaseModel):
    content: str = Field(..., description="CSV text, optionally BOM-prefixed")
    account_id: str | None = Field(None, description="Defaults to the single selected account")


class RejectedRowResponse(BaseModel):
    row: int
    reason: str


class ImportResponse(BaseModel):
    accepted: int
    rejected: list[RejectedRowResponse]
    summary: str
    entries: list[EntryResponse]

    @classmethod
    def from_result(cls, result: ImportResult, persisted: list[Entry]) -> "ImportResponse":
        return cls(
            accepted=len(result.accepted),
            rejected=[RejectedRowResponse(row=r.row, reason=r.reason) for r in result.rejected],
            summary=result.summary(),
            entries=[EntryResponse.from_domain(e) for e in persisted],
        )
