"""Global enums — values must match the DB CHECK constraints exactly."""

from enum import Enum


class EntryResult(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    HALF_WIN = "HALF_WIN"
    HALF_LOSS = "HALF_LOSS"
    CASH_OUT = "CASH_OUT"
    VOID = "VOID"
    PENDING = "PENDING"

    @property
    def is_decided(self) -> bool:
        """Win or Loss — the only results counted in win rate and streaks."""
        return self in (EntryResult.WIN, EntryResult.LOSS)


class Timing(str, Enum):
    PRE = "PRE"
    LIVE = "LIVE"


class ViewMode(str, Enum):
    OVERVIEW = "OVERVIEW"
    SPECIFIC = "SPECIFIC"
