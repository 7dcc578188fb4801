"""Unit tests for LedgerRepository using a MagicMock session factory."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from src.bk_common.enums import EntryResult, Timing
from src.bk_common.errors import (
    AccountNotFoundError,
    EntryNotFoundError,
    PersistenceError,
)
from src.bk_ledger.domain.models import EntryDraft, Leg
from src.bk_ledger.infrastructure.persistence import LedgerRepository

ACC_ID = uuid.uuid4()


def _make_account_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", ACC_ID)
    row.name = kwargs.get("name", "Main")
    row.balance = kwargs.get("balance", Decimal("150.00"))
    row.initial_balance = kwargs.get("initial_balance", Decimal("100.00"))
    row.created_at = datetime.now(UTC)
    return row


def _make_entry_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", uuid.uuid4())
    row.account_id = ACC_ID
    row.created_date = date(2025, 3, 1)
    row.event_date = kwargs.get("event_date", "2025-03-01|2025-03-02")
    row.modality = kwargs.get("modality", "Soccer|Basketball")
    row.description = "A x B|C x D"
    row.market = "ML|Handicap"
    row.selection_text = "A|D"
    row.odd = Decimal("3.2000")
    row.stake = Decimal("50.00")
    row.result = "WIN"
    row.profit = Decimal("110.00")
    row.timing = "PRE|LIVE"
    row.site = None
    row.created_at = datetime.now(UTC)
    return row


def _repo(result=None, side_effect=None):
    """Repository over a factory whose session returns ``result`` from execute."""
    db = MagicMock()
    db.__aenter__.return_value = db
    db.execute = AsyncMock(return_value=result, side_effect=side_effect)
    factory = MagicMock(return_value=db)
    return LedgerRepository(session_factory=factory), db, factory


def _result(rows=None, rowcount: int = 1):
    result = MagicMock()
    result.fetchall.return_value = rows or []
    result.fetchone.return_value = rows[0] if rows else None
    result.rowcount = rowcount
    return result


class TestAccounts:
    async def test_list_accounts_maps_rows(self) -> None:
        repo, _, _ = _repo(_result([_make_account_row()]))
        [account] = await repo.list_accounts()
        assert account.id == str(ACC_ID)
        assert account.balance == Decimal("150.00")
        assert account.pnl == Decimal("50.00")

    async def test_insert_account_starts_balance_at_initial(self) -> None:
        row = _make_account_row(balance=Decimal("10.00"), initial_balance=Decimal("10.00"))
        repo, db, _ = _repo(_result([row]))

        account = await repo.insert_account("Main", Decimal("10.00"))

        params = db.execute.call_args.args[1]
        assert params["name"] == "Main"
        assert params["initial_balance"] == Decimal("10.00")
        assert isinstance(params["id"], uuid.UUID)
        assert account.balance == account.initial_balance

    async def test_update_account_missing_row(self) -> None:
        repo, _, _ = _repo(_result(rowcount=0))
        with pytest.raises(AccountNotFoundError):
            await repo.update_account(str(ACC_ID), {"balance": Decimal("1.00")})

    async def test_update_account_rejects_unknown_column(self) -> None:
        repo, _, factory = _repo(_result())
        with pytest.raises(ValueError):
            await repo.update_account(str(ACC_ID), {"owner": "x"})
        factory.assert_not_called()

    async def test_malformed_id(self) -> None:
        repo, _, _ = _repo(_result())
        with pytest.raises(PersistenceError, match="Malformed id"):
            await repo.delete_account("not-a-uuid")

    async def test_delete_account_missing_row(self) -> None:
        repo, _, _ = _repo(_result(rowcount=0))
        with pytest.raises(AccountNotFoundError):
            await repo.delete_account(str(ACC_ID))


class TestEntries:
    async def test_list_entries_rebuilds_legs(self) -> None:
        repo, db, _ = _repo(_result([_make_entry_row()]))

        [entry] = await repo.list_entries(0, 1000)

        assert db.execute.call_args.args[1] == {"offset": 0, "limit": 1000}
        assert entry.account_id == str(ACC_ID)
        assert entry.result == EntryResult.WIN
        assert [leg.modality for leg in entry.legs] == ["Soccer", "Basketball"]
        assert entry.legs[1].event_date == date(2025, 3, 2)
        assert entry.legs[1].timing == Timing.LIVE
        assert entry.site == ""

    async def test_insert_entries_returns_persisted_rows(self) -> None:
        rows = [_make_entry_row(), _make_entry_row()]
        repo, db, _ = _repo(_result(rows))
        draft = EntryDraft(
            created_date=date(2025, 3, 1),
            legs=[Leg(date(2025, 3, 1), "Soccer")],
            odd=Decimal("2"),
            stake=Decimal("10.00"),
            result=EntryResult.WIN,
            profit=Decimal("10.00"),
        )

        persisted = await repo.insert_entries(str(ACC_ID), [draft, draft])

        assert len(persisted) == 2
        db.execute.assert_awaited_once()

    async def test_insert_nothing(self) -> None:
        repo, _, factory = _repo(_result())
        assert await repo.insert_entries(str(ACC_ID), []) == []
        factory.assert_not_called()

    async def test_update_entry_missing_row(self) -> None:
        repo, _, _ = _repo(_result(rowcount=0))
        with pytest.raises(EntryNotFoundError):
            await repo.update_entry(str(uuid.uuid4()), {"profit": Decimal("1.00")})

    async def test_delete_entry(self) -> None:
        repo, db, _ = _repo(_result(rowcount=1))
        entry_id = uuid.uuid4()
        await repo.delete_entry(str(entry_id))
        assert db.execute.call_args.args[1] == {"id": entry_id}


class TestErrors:
    async def test_sqlalchemy_error_becomes_persistence_error(self) -> None:
        repo, _, _ = _repo(side_effect=SQLAlchemyError("connection reset"))
        with pytest.raises(PersistenceError, match="connection reset") as exc_info:
            await repo.list_accounts()
        assert exc_info.value.http_status == 503
