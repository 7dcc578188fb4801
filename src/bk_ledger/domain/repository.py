"""Repository Protocol — the persistence collaborator contract.

Unit tests inject a mock or in-memory fake that conforms to this Protocol.
Infrastructure layer provides the real implementation.

``list_entries`` pages with offset/limit because a single page is bounded;
callers loop until a short page comes back.
"""

from decimal import Decimal
from typing import Any, Protocol

from src.bk_ledger.domain.models import Account, Entry, EntryDraft


class LedgerRepositoryProtocol(Protocol):
    async def list_accounts(self) -> list[Account]: ...

    async def insert_account(self, name: str, initial_balance: Decimal) -> Account: ...

    async def update_account(self, account_id: str, fields: dict[str, Any]) -> None: ...

    async def delete_account(self, account_id: str) -> None: ...

    async def list_entries(self, offset: int, limit: int) -> list[Entry]: ...

    async def insert_entries(
        self, account_id: str, drafts: list[EntryDraft]
    ) -> list[Entry]: ...

    async def update_entry(self, entry_id: str, fields: dict[str, Any]) -> None: ...

    async def delete_entry(self, entry_id: str) -> None: ...
