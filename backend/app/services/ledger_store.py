"""
Local Store

Holds the session's canonical, newest-first list of transactions and writes
the whole list through to the local repository on every mutation.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from decimal import Decimal

from app.core.exceptions import MalformedLedgerError
from app.core.logging import get_logger
from app.core.utils import timestamp_id
from app.repositories.local_repo import LocalRepository
from app.schemas.models import Totals, Transaction, TransactionCreate, TransactionType

logger = get_logger("rideledger.services.store")


def compute_totals(transactions: Iterable[Transaction]) -> Totals:
    """Sum income and expense in one pass; the sign comes from the type only."""
    income = Decimal("0")
    expense = Decimal("0")
    for txn in transactions:
        if txn.type is TransactionType.INCOME:
            income += txn.amount
        else:
            expense += txn.amount
    return Totals(income=income, expense=expense, balance=income - expense)


class LocalStore:
    def __init__(self, repository: LocalRepository) -> None:
        self.repository = repository
        self._transactions: list[Transaction] = []
        # Sync endpoints run on a thread pool; keep a single writer.
        self._lock = threading.Lock()

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    def load(self) -> list[Transaction]:
        """Read the persisted ledger into memory. Never raises.

        Returns:
            The loaded transactions, or an empty list when nothing usable is stored
        """
        try:
            loaded = self.repository.load_transactions()
        except MalformedLedgerError as e:
            logger.warning(f"Persisted ledger is malformed, starting empty: {e.message}")
            loaded = []
        except OSError as e:
            logger.warning(f"Persisted ledger could not be read, starting empty: {e}")
            loaded = []

        with self._lock:
            self._transactions = loaded
        logger.debug(f"Loaded {len(loaded)} transactions from local storage")
        return list(loaded)

    def replace(self, transactions: list[Transaction]) -> None:
        """Swap the in-memory ledger (hydration). Persisted on the next mutation."""
        with self._lock:
            self._transactions = list(transactions)

    def add(self, draft: TransactionCreate) -> Transaction:
        """Assign an id, insert at the front and persist the full ledger."""
        with self._lock:
            txn = Transaction(
                id=timestamp_id(t.id for t in self._transactions),
                **draft.model_dump(),
            )
            updated = [txn, *self._transactions]
            self.repository.save_transactions(updated)
            self._transactions = updated
        logger.info(f"Added {txn.type.value} transaction {txn.id} ({txn.category.value}, {txn.amount})")
        return txn

    def remove(self, txn_id: str) -> bool:
        """Drop the transaction with ``txn_id`` and persist. Absent ids are a no-op.

        Returns:
            True if a transaction was removed
        """
        with self._lock:
            remaining = [t for t in self._transactions if t.id != txn_id]
            removed = len(remaining) != len(self._transactions)
            self.repository.save_transactions(remaining)
            self._transactions = remaining
        if removed:
            logger.info(f"Removed transaction {txn_id}")
        else:
            logger.debug(f"Remove ignored, transaction {txn_id} not held")
        return removed

    def totals(self) -> Totals:
        return compute_totals(self._transactions)
