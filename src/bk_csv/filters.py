"""Entry filtering and ordering applied upstream of listing and export."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from src.bk_common.enums import EntryResult
from src.bk_ledger.domain.models import Entry


class SortKey(str, Enum):
    CREATED_DATE = "created_date"
    EVENT_DATE = "event_date"
    ODD = "odd"
    STAKE = "stake"
    PROFIT = "profit"


@dataclass
class EntryFilter:
    """All criteria are optional; an empty filter keeps every entry.

    ``modality`` and ``market`` match any leg (case-insensitive). ``sites`` is
    a set of accepted site labels; empty means every site.
    """

    date_from: date | None = None
    date_to: date | None = None
    result: EntryResult | None = None
    modality: str | None = None
    market: str | None = None
    sites: set[str] = field(default_factory=set)
    search: str | None = None
    sort_by: SortKey = SortKey.CREATED_DATE
    descending: bool = True

    @property
    def is_active(self) -> bool:
        return any((
            self.date_from, self.date_to, self.result, self.modality,
            self.market, self.sites, self.search,
        ))

    def matches(self, entry: Entry) -> bool:
        if self.date_from and entry.created_date < self.date_from:
            return False
        if self.date_to and entry.created_date > self.date_to:
            return False
        if self.result and entry.result != self.result:
            return False
        if self.modality and not _any_leg(entry, "modality", self.modality):
            return False
        if self.market and not _any_leg(entry, "market", self.market):
            return False
        if self.sites and entry.site not in self.sites:
            return False
        if self.search:
            needle = self.search.strip().lower()
            haystack = " ".join((
                entry.description, entry.market, entry.modality,
                entry.selection_text, entry.site,
            )).lower()
            if needle not in haystack:
                return False
        return True

    def apply(self, entries: list[Entry]) -> list[Entry]:
        kept = [e for e in entries if self.matches(e)]
        kept.sort(key=_sort_key(self.sort_by), reverse=self.descending)
        return kept


def _any_leg(entry: Entry, attr: str, wanted: str) -> bool:
    target = wanted.strip().lower()
    return any(getattr(leg, attr).lower() == target for leg in entry.legs)


def _sort_key(key: SortKey):
    if key == SortKey.EVENT_DATE:
        return lambda e: (e.last_event_date, e.created_date)
    if key == SortKey.ODD:
        return lambda e: e.odd
    if key == SortKey.STAKE:
        return lambda e: e.stake
    if key == SortKey.PROFIT:
        return lambda e: e.profit
    return lambda e: (e.created_date, e.created_at.timestamp() if e.created_at else 0.0)
