"""Balance invariant: balance == initial_balance + sum(profit of owned entries)."""

import logging
from collections.abc import Iterable
from decimal import Decimal

from src.bk_common.money import ZERO
from src.bk_ledger.domain.models import Account, Entry

logger = logging.getLogger(__name__)


def balance_drift(account: Account, entries: Iterable[Entry]) -> Decimal:
    """Stored balance minus the balance implied by the account's entries."""
    pnl = sum((e.profit for e in entries if e.account_id == account.id), ZERO)
    return account.balance - (account.initial_balance + pnl)


def verify_balance_invariant(account: Account, entries: Iterable[Entry]) -> list[str]:
    """Check the invariant for one account. Returns list of violation strings."""
    violations: list[str] = []
    drift = balance_drift(account, entries)
    if drift != 0:
        msg = (
            f"Balance invariant violated: account={account.id} "
            f"balance={account.balance} initial={account.initial_balance} drift={drift}"
        )
        violations.append(msg)
        logger.error(msg)
    else:
        logger.debug("Balance invariant OK: account=%s balance=%s", account.id, account.balance)
    return violations
