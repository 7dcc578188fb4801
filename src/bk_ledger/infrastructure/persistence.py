"""LedgerRepository — concrete implementation of LedgerRepositoryProtocol.

Each call runs in its own session and transaction (``async with db.begin()``).
Any SQLAlchemy failure surfaces as PersistenceError; the caller decides what
partial progress means.

Multi-leg fields are stored pipe-joined and rebuilt into ``Entry.legs`` on read.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Any

from sqlalchemy import insert, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bk_common.enums import EntryResult
from src.bk_common.errors import (
    AccountNotFoundError,
    EntryNotFoundError,
    PersistenceError,
)
from src.bk_ledger.domain.models import (
    Account,
    Entry,
    EntryDraft,
    entry_fields,
    split_legs,
)
from src.bk_ledger.infrastructure.db_models import AccountORM, EntryORM

_ACCOUNT_COLUMNS = frozenset({"name", "balance", "initial_balance"})
_ENTRY_COLUMNS = frozenset({
    "account_id", "created_date", "event_date", "modality", "description",
    "market", "selection_text", "odd", "stake", "result", "profit", "timing", "site",
})

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_LIST_ACCOUNTS_SQL = text("""
    SELECT id, name, balance, initial_balance, created_at
    FROM accounts
    ORDER BY created_at, id
""")

_INSERT_ACCOUNT_SQL = text("""
    INSERT INTO accounts (id, name, balance, initial_balance)
    VALUES (:id, :name, :initial_balance, :initial_balance)
    RETURNING id, name, balance, initial_balance, created_at
""")

_DELETE_ACCOUNT_SQL = text("DELETE FROM accounts WHERE id = :id")

_LIST_ENTRIES_SQL = text("""
    SELECT id, account_id, created_date, event_date, modality, description,
           market, selection_text, odd, stake, result, profit, timing, site,
           created_at
    FROM entries
    ORDER BY created_at, id
    OFFSET :offset
    LIMIT :limit
""")

_DELETE_ENTRY_SQL = text("DELETE FROM entries WHERE id = :id")


def _row_to_account(row: object) -> Account:
    return Account(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        balance=Decimal(row.balance),  # type: ignore[attr-defined]
        initial_balance=Decimal(row.initial_balance),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_entry(row: object) -> Entry:
    return Entry(
        id=str(row.id),  # type: ignore[attr-defined]
        account_id=str(row.account_id),  # type: ignore[attr-defined]
        created_date=row.created_date,  # type: ignore[attr-defined]
        legs=split_legs(
            row.event_date,  # type: ignore[attr-defined]
            row.modality,  # type: ignore[attr-defined]
            row.description,  # type: ignore[attr-defined]
            row.market,  # type: ignore[attr-defined]
            row.selection_text,  # type: ignore[attr-defined]
            row.timing,  # type: ignore[attr-defined]
        ),
        odd=Decimal(row.odd),  # type: ignore[attr-defined]
        stake=Decimal(row.stake),  # type: ignore[attr-defined]
        result=EntryResult(row.result),  # type: ignore[attr-defined]
        profit=Decimal(row.profit),  # type: ignore[attr-defined]
        site=row.site or "",  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _as_uuid(value: str) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise PersistenceError(f"Malformed id: {value!r}") from None


class LedgerRepository:
    """Concrete repository — one transaction per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None) -> None:
        if session_factory is None:
            from src.bk_common.database import async_session_factory

            session_factory = async_session_factory
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as db, db.begin():
                yield db
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Store call failed: {exc}") from exc

    # --- accounts ---

    async def list_accounts(self) -> list[Account]:
        async with self._transaction() as db:
            result = await db.execute(_LIST_ACCOUNTS_SQL)
            return [_row_to_account(row) for row in result.fetchall()]

    async def insert_account(self, name: str, initial_balance: Decimal) -> Account:
        async with self._transaction() as db:
            result = await db.execute(
                _INSERT_ACCOUNT_SQL,
                {"id": uuid.uuid4(), "name": name, "initial_balance": initial_balance},
            )
            row = result.fetchone()
            if row is None:
                raise PersistenceError("Account insert returned no rows")
            return _row_to_account(row)

    async def update_account(self, account_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - _ACCOUNT_COLUMNS
        if unknown:
            raise ValueError(f"Unknown account columns: {sorted(unknown)}")
        async with self._transaction() as db:
            result = await db.execute(
                update(AccountORM)
                .where(AccountORM.id == _as_uuid(account_id))
                .values(**fields)
            )
            if result.rowcount == 0:
                raise AccountNotFoundError(account_id)

    async def delete_account(self, account_id: str) -> None:
        # entries.account_id is ON DELETE CASCADE
        async with self._transaction() as db:
            result = await db.execute(_DELETE_ACCOUNT_SQL, {"id": _as_uuid(account_id)})
            if result.rowcount == 0:
                raise AccountNotFoundError(account_id)

    # --- entries ---

    async def list_entries(self, offset: int, limit: int) -> list[Entry]:
        async with self._transaction() as db:
            result = await db.execute(_LIST_ENTRIES_SQL, {"offset": offset, "limit": limit})
            return [_row_to_entry(row) for row in result.fetchall()]

    async def insert_entries(self, account_id: str, drafts: list[EntryDraft]) -> list[Entry]:
        if not drafts:
            return []
        owner = _as_uuid(account_id)
        rows = [
            {"id": uuid.uuid4(), "account_id": owner, **entry_fields(d)}
            for d in drafts
        ]
        async with self._transaction() as db:
            result = await db.execute(
                insert(EntryORM).values(rows).returning(*EntryORM.__table__.columns)
            )
            return [_row_to_entry(row) for row in result.fetchall()]

    async def update_entry(self, entry_id: str, fields: dict[str, Any]) -> None:
        unknown = set(fields) - _ENTRY_COLUMNS
        if unknown:
            raise ValueError(f"Unknown entry columns: {sorted(unknown)}")
        values = dict(fields)
        if "account_id" in values:
            values["account_id"] = _as_uuid(values["account_id"])
        async with self._transaction() as db:
            result = await db.execute(
                update(EntryORM).where(EntryORM.id == _as_uuid(entry_id)).values(**values)
            )
            if result.rowcount == 0:
                raise EntryNotFoundError(entry_id)

    async def delete_entry(self, entry_id: str) -> None:
        async with self._transaction() as db:
            result = await db.execute(_DELETE_ENTRY_SQL, {"id": _as_uuid(entry_id)})
            if result.rowcount == 0:
                raise EntryNotFoundError(entry_id)
