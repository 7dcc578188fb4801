"""Repository Protocol for profit goals."""

from typing import Protocol

from src.bk_metrics.domain.models import Goal


class GoalRepositoryProtocol(Protocol):
    async def list_goals(self, account_id: str | None, year: int) -> list[Goal]: ...

    async def upsert_goal(self, goal: Goal) -> Goal: ...
