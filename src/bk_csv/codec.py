"""Entry CSV import and export.

Column order (fixed, positional):

  created-date, modality, event-date, event, market, selection, odd, stake,
  result-code, profit, timing (optional), site (optional)

Import never aborts on a bad row: each one is recorded as a ``RejectedRow``
and the scan continues. Row numbers count data records only; the header and
blank lines are not numbered.
"""

import logging
import re
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from src.bk_common.dates import canonical_date_text, normalize_date
from src.bk_common.enums import EntryResult
from src.bk_common.errors import ValidationError
from src.bk_common.money import parse_money, parse_odd, to_money
from src.bk_csv.tokenizer import BOM, tokenize
from src.bk_ledger.domain.models import (
    Entry,
    EntryDraft,
    calculate_profit,
    split_legs,
    validate_wager,
)

logger = logging.getLogger(__name__)

HEADERS = [
    "Data",
    "Modalidade",
    "Data do Evento",
    "Evento",
    "Mercado",
    "Entrada",
    "Odd",
    "Stake",
    "Resultado",
    "Lucro/Prejuízo",
    "Timing",
    "Site",
]
MIN_COLUMNS = 10
MAX_SAMPLED_REASONS = 5

_HEADER_FIRST_CELLS = {"data", "date", "created date", "created_date"}

RESULT_LABELS = {
    EntryResult.WIN: "Ganha",
    EntryResult.LOSS: "Perdida",
    EntryResult.HALF_WIN: "Ganhou Metade",
    EntryResult.HALF_LOSS: "Perdeu Metade",
    EntryResult.CASH_OUT: "Cashout",
    EntryResult.VOID: "Devolvida",
    EntryResult.PENDING: "Pendente",
}

_RESULT_CODES = {
    # Win
    "G": EntryResult.WIN,
    "GREEN": EntryResult.WIN,
    "GANHA": EntryResult.WIN,
    "WIN": EntryResult.WIN,
    # Loss
    "P": EntryResult.LOSS,
    "RED": EntryResult.LOSS,
    "PERDIDA": EntryResult.LOSS,
    "LOSS": EntryResult.LOSS,
    # Half win
    "GM": EntryResult.HALF_WIN,
    "GANHOU METADE": EntryResult.HALF_WIN,
    "GREEN_HALF": EntryResult.HALF_WIN,
    "HALF WIN": EntryResult.HALF_WIN,
    "HALF_WIN": EntryResult.HALF_WIN,
    # Half loss
    "PM": EntryResult.HALF_LOSS,
    "PERDEU METADE": EntryResult.HALF_LOSS,
    "RED_HALF": EntryResult.HALF_LOSS,
    "HALF LOSS": EntryResult.HALF_LOSS,
    "HALF_LOSS": EntryResult.HALF_LOSS,
    # Cash out
    "C": EntryResult.CASH_OUT,
    "CASHOUT": EntryResult.CASH_OUT,
    "CASH OUT": EntryResult.CASH_OUT,
    "CASH_OUT": EntryResult.CASH_OUT,
    # Void
    "D": EntryResult.VOID,
    "DEVOLVIDA": EntryResult.VOID,
    "VOID": EntryResult.VOID,
    # Pending
    "PENDENTE": EntryResult.PENDING,
    "PENDING": EntryResult.PENDING,
}


@dataclass
class RejectedRow:
    row: int
    reason: str


@dataclass
class ImportResult:
    accepted: list[EntryDraft] = field(default_factory=list)
    rejected: list[RejectedRow] = field(default_factory=list)

    def summary(self) -> str:
        """``"N accepted, M rejected"`` plus up to five sampled reasons."""
        text = f"{len(self.accepted)} accepted, {len(self.rejected)} rejected"
        if self.rejected:
            sample = "; ".join(
                f"row {r.row}: {r.reason}" for r in self.rejected[:MAX_SAMPLED_REASONS]
            )
            text = f"{text} ({sample})"
        return text


class _RowError(Exception):
    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


def parse_result_code(raw: str) -> EntryResult:
    """Map a result code or label (case-insensitive) to ``EntryResult``."""
    key = " ".join((raw or "").split()).upper()
    try:
        return _RESULT_CODES[key]
    except KeyError:
        raise ValidationError(f"Unknown result code: {raw!r}") from None


def _is_header(fields: list[str]) -> bool:
    return bool(fields) and fields[0].strip().lower() in _HEADER_FIRST_CELLS


def _cell(fields: list[str], index: int) -> str:
    return fields[index] if index < len(fields) else ""


def _parse_row(fields: list[str]) -> EntryDraft:
    if len(fields) < MIN_COLUMNS:
        raise _RowError(f"expected at least {MIN_COLUMNS} columns, got {len(fields)}")

    try:
        created = normalize_date(fields[0])
    except ValidationError:
        raise _RowError("invalid date") from None

    try:
        legs = split_legs(
            event_date=fields[2] or created.isoformat(),
            modality=fields[1],
            description=fields[3],
            market=fields[4],
            selection=fields[5],
            timing=_cell(fields, 10),
        )
    except ValidationError as exc:
        raise _RowError(exc.message) from None

    try:
        odd = parse_odd(fields[6])
    except ValueError:
        raise _RowError("invalid odd") from None
    try:
        stake = parse_money(fields[7])
    except ValueError:
        raise _RowError("invalid stake") from None
    try:
        result = parse_result_code(fields[8])
    except ValidationError as exc:
        raise _RowError(exc.message) from None

    if fields[9]:
        try:
            profit = parse_money(fields[9])
        except ValueError:
            raise _RowError("invalid profit") from None
    else:
        try:
            profit = calculate_profit(result, odd, stake)
        except ValidationError:
            raise _RowError("invalid profit") from None

    try:
        validate_wager(odd, stake, legs)
    except ValidationError as exc:
        raise _RowError(exc.message) from None

    return EntryDraft(
        created_date=created,
        legs=legs,
        odd=odd,
        stake=stake,
        result=result,
        profit=profit,
        site=_cell(fields, 11),
    )


def parse_entries_csv(text: str) -> ImportResult:
    """Parse exported (or hand-made) CSV into drafts plus a rejection list."""
    result = ImportResult()
    row_number = 0
    for index, fields in enumerate(tokenize(text)):
        if index == 0 and _is_header(fields):
            continue
        row_number += 1
        try:
            result.accepted.append(_parse_row(fields))
        except _RowError as exc:
            result.rejected.append(RejectedRow(row=row_number, reason=exc.reason))

    if result.rejected:
        logger.info("CSV import: %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def _format_odd(odd: Decimal) -> str:
    # At least two decimals; longer odds (1.855) keep their precision
    if odd == odd.quantize(Decimal("0.01")):
        return f"{odd:.2f}"
    return format(odd.normalize(), "f")


def _format_money(value: Decimal) -> str:
    return f"{to_money(value):.2f}"


def _entry_row(entry: Entry) -> list[str]:
    return [
        canonical_date_text(entry.created_date),
        entry.modality,
        entry.event_date_text,
        entry.description,
        entry.market,
        entry.selection_text,
        _format_odd(entry.odd),
        _format_money(entry.stake),
        RESULT_LABELS[entry.result],
        _format_money(entry.profit),
        entry.timing_text,
        entry.site,
    ]


def serialize_entries_csv(entries: list[Entry]) -> str:
    """Header plus one fully quoted row per entry, prefixed by a BOM.

    Filtering and ordering are the caller's job (see ``EntryFilter``).
    """
    lines = [",".join(_quote(h) for h in HEADERS)]
    lines.extend(",".join(_quote(v) for v in _entry_row(e)) for e in entries)
    return BOM + "\n".join(lines)


def export_filename(account_name: str | None, today: date) -> str:
    """``entries_<Account_Name>_<YYYY-MM-DD>.csv``; the name part is optional."""
    suffix = ""
    if account_name and account_name.strip():
        suffix = "_" + re.sub(r"\s+", "_", account_name.strip())
    return f"entries{suffix}_{today.isoformat()}.csv"
