"""Preference store Protocol — where the selection survives restarts."""

from dataclasses import dataclass, field
from typing import Protocol

from src.bk_common.enums import ViewMode


@dataclass
class SelectionPreferences:
    view_mode: ViewMode = ViewMode.OVERVIEW
    account_ids: list[str] = field(default_factory=list)


class PreferenceStoreProtocol(Protocol):
    async def load(self) -> SelectionPreferences | None: ...

    async def save(self, prefs: SelectionPreferences) -> None: ...
