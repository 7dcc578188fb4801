"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Validation (dates, required fields, multi-leg segments)
  2xxx: Account
  3xxx: Entry
  4xxx: Selection
  9xxx: System / persistence
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Validation ---

class ValidationError(AppError):
    """Malformed date, missing required field or wrong multi-leg segment count."""

    def __init__(self, detail: str) -> None:
        super().__init__(1001, detail, 422)


# --- 2xxx / 3xxx: Not found ---

class NotFoundError(AppError):
    pass


class AccountNotFoundError(NotFoundError):
    def __init__(self, account_id: str) -> None:
        super().__init__(2001, f"Account not found: {account_id}", 404)


class EntryNotFoundError(NotFoundError):
    def __init__(self, entry_id: str) -> None:
        super().__init__(3001, f"Entry not found: {entry_id}", 404)


# --- 4xxx: Selection ---

class SelectionError(AppError):
    def __init__(self, selected: int) -> None:
        self.selected = selected
        super().__init__(
            4001,
            f"Exactly one account must be selected, got {selected}",
            409,
        )


# --- 9xxx: System ---

class PersistenceError(AppError):
    """Store call failed. ``succeeded``/``total`` describe partial bulk progress.

    ``report`` carries extra batch context for the response (e.g. the CSV
    rejection list of an import that failed part-way).
    """

    def __init__(
        self,
        detail: str,
        succeeded: int = 0,
        total: int = 0,
        report: dict | None = None,
    ) -> None:
        self.succeeded = succeeded
        self.total = total
        self.report = report or {}
        super().__init__(9001, detail, 503)
