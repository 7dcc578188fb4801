"""GoalRepository — concrete implementation of GoalRepositoryProtocol.

One goal per (account or combined, year, month); saving an existing period
replaces its target. Annual goals are stored with ``month = 0``.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bk_common.errors import PersistenceError
from src.bk_metrics.domain.models import Goal

_LIST_GOALS_SQL = text("""
    SELECT account_id, year, month, target
    FROM goals
    WHERE year = :year
      AND account_id IS NOT DISTINCT FROM :account_id
    ORDER BY month
""")

# Conflict target must match the uq_goals_period index expression
_UPSERT_GOAL_SQL = text("""
    INSERT INTO goals (id, account_id, kind, year, month, target)
    VALUES (:id, :account_id, :kind, :year, :month, :target)
    ON CONFLICT ((COALESCE(account_id, CAST('00000000-0000-0000-0000-000000000000' AS UUID))),
                 year, month)
    DO UPDATE SET target = EXCLUDED.target, kind = EXCLUDED.kind, updated_at = NOW()
    RETURNING account_id, year, month, target
""")


def _row_to_goal(row: object) -> Goal:
    month = row.month  # type: ignore[attr-defined]
    account_id = row.account_id  # type: ignore[attr-defined]
    return Goal(
        year=row.year,  # type: ignore[attr-defined]
        target=Decimal(row.target),  # type: ignore[attr-defined]
        month=month or None,
        account_id=str(account_id) if account_id is not None else None,
    )


def _scope(account_id: str | None) -> uuid.UUID | None:
    if account_id is None:
        return None
    try:
        return uuid.UUID(str(account_id))
    except ValueError:
        raise PersistenceError(f"Malformed id: {account_id!r}") from None


class GoalRepository:
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

    async def list_goals(self, account_id: str | None, year: int) -> list[Goal]:
        async with self._transaction() as db:
            result = await db.execute(
                _LIST_GOALS_SQL, {"year": year, "account_id": _scope(account_id)}
            )
            return [_row_to_goal(row) for row in result.fetchall()]

    async def upsert_goal(self, goal: Goal) -> Goal:
        async with self._transaction() as db:
            result = await db.execute(
                _UPSERT_GOAL_SQL,
                {
                    "id": uuid.uuid4(),
                    "account_id": _scope(goal.account_id),
                    "kind": goal.kind.value,
                    "year": goal.year,
                    "month": goal.month or 0,
                    "target": goal.target,
                },
            )
            row = result.fetchone()
            if row is None:
                raise PersistenceError("Goal upsert returned no rows")
            return _row_to_goal(row)
