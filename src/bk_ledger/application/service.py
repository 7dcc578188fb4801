"""LedgerStore — owns accounts and entries and keeps balances consistent.

Every mutation writes to the persistence collaborator first and touches the
in-memory collections only after the writes it depends on have succeeded.
Account balance updates are issued only after the entry writes they account
for are confirmed, never speculatively.

Bulk inserts are chunked (``IMPORT_CHUNK_SIZE``) with no cross-chunk rollback:
when chunk K fails, chunks 0..K-1 stay committed, their profit is still
applied to the balance, and a PersistenceError reports how many succeeded.

Mutations are serialized by an ``asyncio.Lock`` (single logical writer).
Reads return copies so aggregations never observe a collection mid-mutation.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import replace
from decimal import Decimal

from config.settings import settings
from src.bk_common.dates import normalize_date
from src.bk_common.errors import (
    AccountNotFoundError,
    EntryNotFoundError,
    PersistenceError,
    ValidationError,
)
from src.bk_common.money import ZERO, to_money
from src.bk_ledger.domain.invariants import balance_drift, verify_balance_invariant
from src.bk_ledger.domain.models import (
    Account,
    Entry,
    EntryDraft,
    LedgerSnapshot,
    Leg,
    entry_fields,
    validate_wager,
)
from src.bk_ledger.domain.repository import LedgerRepositoryProtocol
from src.bk_selection.domain.models import Selection, SelectionModel
from src.bk_selection.domain.repository import (
    PreferenceStoreProtocol,
    SelectionPreferences,
)

logger = logging.getLogger(__name__)


def _money(value: Decimal, label: str) -> Decimal:
    try:
        return to_money(value)
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}") from None


def _copy_entry(entry: Entry) -> Entry:
    return replace(entry, legs=list(entry.legs))


def _normalize_legs(draft: EntryDraft | Entry) -> list[Leg]:
    return [replace(leg, event_date=normalize_date(leg.event_date)) for leg in draft.legs]


def _normalize_draft(draft: EntryDraft) -> EntryDraft:
    legs = _normalize_legs(draft)
    validate_wager(draft.odd, draft.stake, legs)
    return replace(
        draft,
        created_date=normalize_date(draft.created_date),
        legs=legs,
        stake=_money(draft.stake, "stake"),
        profit=_money(draft.profit, "profit"),
    )


class LedgerStore:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        preferences: PreferenceStoreProtocol | None = None,
        selection: SelectionModel | None = None,
        chunk_size: int | None = None,
        page_size: int | None = None,
    ) -> None:
        if repo is None:
            from src.bk_ledger.infrastructure.persistence import LedgerRepository

            repo = LedgerRepository()
        self._repo: LedgerRepositoryProtocol = repo
        self._preferences = preferences
        self._selection = selection or SelectionModel()
        self._chunk_size = chunk_size or settings.IMPORT_CHUNK_SIZE
        self._page_size = page_size or settings.ENTRY_PAGE_SIZE
        self._accounts: dict[str, Account] = {}
        self._entries: dict[str, Entry] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Read every account and entry, then restore the saved selection."""
        async with self._lock:
            accounts = await self._repo.list_accounts()
            entries: list[Entry] = []
            offset = 0
            while True:
                page = await self._repo.list_entries(offset, self._page_size)
                entries.extend(page)
                if len(page) < self._page_size:
                    break
                offset += len(page)

            self._accounts = {a.id: a for a in accounts}
            self._entries = {e.id: e for e in entries}

            prefs = await self._preferences.load() if self._preferences else None
            if prefs is None:
                self._selection.enter_overview()
            else:
                self._selection.restore(prefs.view_mode, prefs.account_ids, self._accounts)

            for account in accounts:
                verify_balance_invariant(account, entries)
            logger.info("Ledger loaded: %d accounts, %d entries", len(accounts), len(entries))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def accounts(self) -> list[Account]:
        return [replace(a) for a in self._accounts.values()]

    @property
    def selection(self) -> Selection:
        return self._selection.state

    @property
    def is_overview(self) -> bool:
        return self._selection.is_overview

    def get_account(self, account_id: str) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return replace(account)

    def get_entry(self, entry_id: str) -> Entry:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(entry_id)
        return _copy_entry(entry)

    def all_entries(self) -> list[Entry]:
        return [_copy_entry(e) for e in self._entries.values()]

    def selected_account_ids(self) -> set[str]:
        return self._selection.active_ids(self._accounts)

    def selected_accounts(self) -> list[Account]:
        active = self.selected_account_ids()
        return [replace(a) for a in self._accounts.values() if a.id in active]

    def entries_for_selection(self) -> list[Entry]:
        active = self.selected_account_ids()
        return [_copy_entry(e) for e in self._entries.values() if e.account_id in active]

    def total_balance(self) -> Decimal:
        return sum((a.balance for a in self.selected_accounts()), ZERO)

    def total_initial_balance(self) -> Decimal:
        return sum((a.initial_balance for a in self.selected_accounts()), ZERO)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            accounts=self.selected_accounts(),
            entries=self.entries_for_selection(),
        )

    def balance_drift(self, account_id: str) -> Decimal:
        return balance_drift(self.get_account(account_id), self._entries.values())

    # ------------------------------------------------------------------
    # Entry mutations
    # ------------------------------------------------------------------

    async def add_entries(
        self,
        drafts: Sequence[EntryDraft],
        account_id: str | None = None,
    ) -> list[Entry]:
        """Persist new entries against one account and apply their profit.

        Without ``account_id`` the target is the single selected account
        (SelectionError otherwise, raised before any persistence call).
        """
        async with self._lock:
            if account_id is None:
                target_id = self._selection.target_account_id(self._accounts)
            else:
                target_id = account_id
                if target_id not in self._accounts:
                    raise AccountNotFoundError(target_id)

            normalized = [_normalize_draft(d) for d in drafts]
            if not normalized:
                return []

            persisted: list[Entry] = []
            failure: PersistenceError | None = None
            for start in range(0, len(normalized), self._chunk_size):
                chunk = normalized[start:start + self._chunk_size]
                try:
                    persisted.extend(await self._repo.insert_entries(target_id, chunk))
                except PersistenceError as exc:
                    failure = exc
                    logger.warning(
                        "Chunk insert failed after %d/%d entries: %s",
                        len(persisted), len(normalized), exc.message,
                    )
                    break

            if persisted:
                await self._apply_inserted(target_id, persisted, total=len(normalized))

            if failure is not None:
                raise PersistenceError(
                    f"Persisted {len(persisted)} of {len(normalized)} entries: {failure.message}",
                    succeeded=len(persisted),
                    total=len(normalized),
                ) from failure

            logger.info("Added %d entries to account %s", len(persisted), target_id)
            return [_copy_entry(e) for e in persisted]

    async def _apply_inserted(self, account_id: str, persisted: list[Entry], total: int) -> None:
        delta = sum((e.profit for e in persisted), ZERO)
        account = self._accounts[account_id]
        new_balance = account.balance + delta
        try:
            if delta != 0:
                await self._repo.update_account(account_id, {"balance": new_balance})
        except PersistenceError as exc:
            # Entries are durable, the balance is not: mirror the store
            self._entries.update({e.id: e for e in persisted})
            verify_balance_invariant(account, self._entries.values())
            raise PersistenceError(
                f"Entries persisted but balance update failed: {exc.message}",
                succeeded=len(persisted),
                total=total,
            ) from exc

        self._entries.update({e.id: e for e in persisted})
        self._accounts[account_id] = replace(account, balance=new_balance)
        self._check_invariant(account_id)

    async def update_entry(self, entry: Entry) -> Entry:
        """Replace an entry; the caller has already recomputed its profit."""
        async with self._lock:
            old = self._entries.get(entry.id)
            if old is None:
                raise EntryNotFoundError(entry.id)
            if entry.account_id not in self._accounts:
                raise AccountNotFoundError(entry.account_id)

            legs = _normalize_legs(entry)
            validate_wager(entry.odd, entry.stake, legs)
            new = replace(
                entry,
                created_date=normalize_date(entry.created_date),
                legs=legs,
                stake=_money(entry.stake, "stake"),
                profit=_money(entry.profit, "profit"),
                created_at=old.created_at,
            )

            fields = entry_fields(new)
            fields["account_id"] = new.account_id
            await self._repo.update_entry(new.id, fields)

            balances: dict[str, Decimal] = {}
            if new.account_id == old.account_id:
                delta = new.profit - old.profit
                if delta != 0:
                    balances[new.account_id] = self._accounts[new.account_id].balance + delta
            else:
                balances[old.account_id] = self._accounts[old.account_id].balance - old.profit
                balances[new.account_id] = self._accounts[new.account_id].balance + new.profit
            for account_id, balance in balances.items():
                await self._repo.update_account(account_id, {"balance": balance})

            self._entries[new.id] = new
            for account_id, balance in balances.items():
                self._accounts[account_id] = replace(self._accounts[account_id], balance=balance)
            for account_id in {old.account_id, new.account_id}:
                self._check_invariant(account_id)

            logger.info("Updated entry %s (profit %s -> %s)", new.id, old.profit, new.profit)
            return _copy_entry(new)

    async def delete_entry(self, entry_id: str) -> None:
        async with self._lock:
            entry = self._entries.get(entry_id)
            if entry is None:
                raise EntryNotFoundError(entry_id)

            await self._repo.delete_entry(entry_id)
            account = self._accounts.get(entry.account_id)
            new_balance = None
            if account is not None and entry.profit != 0:
                new_balance = account.balance - entry.profit
                await self._repo.update_account(account.id, {"balance": new_balance})

            del self._entries[entry_id]
            if account is not None:
                if new_balance is not None:
                    self._accounts[account.id] = replace(account, balance=new_balance)
                self._check_invariant(account.id)
            logger.info("Deleted entry %s", entry_id)

    # ------------------------------------------------------------------
    # Account mutations
    # ------------------------------------------------------------------

    async def add_account(self, name: str, initial_balance: Decimal) -> Account:
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("Account name is required")
        async with self._lock:
            account = await self._repo.insert_account(clean, _money(initial_balance, "initial balance"))
            self._accounts[account.id] = account
            logger.info("Created account %s (%s)", account.id, clean)
            return replace(account)

    async def edit_account(
        self,
        account_id: str,
        name: str,
        balance: Decimal,
        initial_balance: Decimal,
    ) -> Account:
        clean = (name or "").strip()
        if not clean:
            raise ValidationError("Account name is required")
        async with self._lock:
            account = self._accounts.get(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            updated = replace(
                account,
                name=clean,
                balance=_money(balance, "balance"),
                initial_balance=_money(initial_balance, "initial balance"),
            )
            await self._repo.update_account(
                account_id,
                {
                    "name": updated.name,
                    "balance": updated.balance,
                    "initial_balance": updated.initial_balance,
                },
            )
            self._accounts[account_id] = updated
            drift = balance_drift(updated, self._entries.values())
            if drift != 0:
                logger.warning("Manual balance edit on %s leaves drift %s", account_id, drift)
            return replace(updated)

    async def delete_account(self, account_id: str) -> None:
        """Delete an account; its entries leave the in-memory ledger with it."""
        async with self._lock:
            if account_id not in self._accounts:
                raise AccountNotFoundError(account_id)
            await self._repo.delete_account(account_id)
            del self._accounts[account_id]
            owned = [eid for eid, e in self._entries.items() if e.account_id == account_id]
            for eid in owned:
                del self._entries[eid]
            self._selection.account_deleted(account_id)
            logger.info("Deleted account %s with %d entries", account_id, len(owned))
            await self._save_preferences()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    async def enter_overview(self) -> None:
        self._selection.enter_overview()
        await self._save_preferences()

    async def select_single(self, account_id: str) -> None:
        if account_id not in self._accounts:
            raise AccountNotFoundError(account_id)
        self._selection.select_single(account_id)
        await self._save_preferences()

    async def toggle(self, account_id: str) -> None:
        if account_id not in self._accounts:
            raise AccountNotFoundError(account_id)
        self._selection.toggle(account_id, self._accounts)
        await self._save_preferences()

    async def _save_preferences(self) -> None:
        if self._preferences is None:
            return
        await self._preferences.save(
            SelectionPreferences(
                view_mode=self._selection.view_mode,
                account_ids=sorted(self.selected_account_ids()) if not self.is_overview else [],
            )
        )

    def _check_invariant(self, account_id: str) -> list[str]:
        account = self._accounts.get(account_id)
        if account is None:
            return []
        return verify_balance_invariant(account, self._entries.values())
