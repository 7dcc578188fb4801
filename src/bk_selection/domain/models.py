"""Account selection state machine.

Two states: ``Overview`` (every account active) and ``Specific(ids)`` (exactly
the given, never-empty id set active). ``SelectionModel`` owns the current
state and applies transitions; it never holds an empty selection.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from src.bk_common.enums import ViewMode
from src.bk_common.errors import SelectionError


@dataclass(frozen=True)
class Overview:
    pass


@dataclass(frozen=True)
class Specific:
    ids: frozenset[str]

    def __post_init__(self) -> None:
        if not self.ids:
            raise ValueError("Specific selection requires at least one account id")


Selection = Overview | Specific


class SelectionModel:
    def __init__(self, state: Selection | None = None) -> None:
        self._state: Selection = state or Overview()

    @property
    def state(self) -> Selection:
        return self._state

    @property
    def is_overview(self) -> bool:
        return isinstance(self._state, Overview)

    @property
    def view_mode(self) -> ViewMode:
        return ViewMode.OVERVIEW if self.is_overview else ViewMode.SPECIFIC

    def active_ids(self, all_ids: Iterable[str]) -> set[str]:
        known = set(all_ids)
        if isinstance(self._state, Overview):
            return known
        return set(self._state.ids) & known

    def target_account_id(self, all_ids: Iterable[str]) -> str:
        """The single account a mutation may target, else SelectionError."""
        active = self.active_ids(all_ids)
        if len(active) != 1:
            raise SelectionError(len(active))
        return next(iter(active))

    # --- transitions ---

    def enter_overview(self) -> None:
        self._state = Overview()

    def select_single(self, account_id: str) -> None:
        self._state = Specific(frozenset({account_id}))

    def toggle(self, account_id: str, all_ids: Iterable[str]) -> None:
        """Add or remove one id; removing the last selected id is a no-op."""
        if isinstance(self._state, Overview):
            current = set(all_ids)
        else:
            current = set(self._state.ids)

        if account_id in current:
            if len(current) == 1:
                # Never empty: the last remaining id stays selected
                self._state = Specific(frozenset(current))
                return
            current.discard(account_id)
        else:
            current.add(account_id)
        self._state = Specific(frozenset(current))

    def account_deleted(self, account_id: str) -> None:
        if isinstance(self._state, Overview):
            return
        remaining = self._state.ids - {account_id}
        self._state = Specific(remaining) if remaining else Overview()

    def restore(self, view_mode: ViewMode, account_ids: Iterable[str], all_ids: Iterable[str]) -> None:
        """Rebuild state from stored preferences, dropping unknown ids."""
        known = set(all_ids) & set(account_ids)
        if view_mode == ViewMode.SPECIFIC and known:
            self._state = Specific(frozenset(known))
        else:
            self._state = Overview()
