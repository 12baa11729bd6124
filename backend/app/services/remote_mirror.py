"""
Remote Mirror

Best-effort replica of the ledger in a hosted table. Every operation is
skipped while no client is configured, and every remote failure is logged
and swallowed: the local store stays the source of truth and is never
rolled back. There is no retry and no reconciliation, so the two copies can
diverge.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from app.adapters.remote_schema import from_remote_record, to_remote_record
from app.core.exceptions import RemoteMirrorError
from app.core.logging import get_logger
from app.schemas.models import RemoteConfig, Transaction

logger = get_logger("rideledger.services.mirror")


class RemoteTableClient(Protocol):
    def select_all_ordered_by_date_desc(self) -> list[tuple[str, dict[str, Any]]]: ...

    def insert_one(self, record_id: str, record: dict[str, Any]) -> None: ...

    def delete_by_id(self, record_id: str) -> None: ...


ClientFactory = Callable[[RemoteConfig], RemoteTableClient]


class RemoteMirror:
    def __init__(
        self,
        client_factory: ClientFactory,
        client: RemoteTableClient | None = None,
    ) -> None:
        self.client_factory = client_factory
        self.client = client
        self.endpoint: str | None = None

    @property
    def configured(self) -> bool:
        return self.client is not None

    def configure(self, config: RemoteConfig) -> None:
        """Build a client for ``config``; on failure the mirror is left inert.

        Raises:
            ConfigurationError: If the client cannot be constructed
        """
        self.disable()
        self.client = self.client_factory(config)
        self.endpoint = config.endpoint
        logger.info(f"Remote mirror configured for '{config.endpoint}'")

    def disable(self) -> None:
        self.client = None
        self.endpoint = None

    def fetch_all(self) -> list[Transaction] | None:
        """Read the whole remote ledger, newest date first.

        Returns:
            Normalized transactions, or None when the mirror is inert or the
            read failed for any reason (network, auth, malformed rows)
        """
        if self.client is None:
            logger.info("Remote mirror not configured, using local storage")
            return None

        try:
            rows = self.client.select_all_ordered_by_date_desc()
            transactions = [from_remote_record(record_id, record) for record_id, record in rows]
            ids = [txn.id for txn in transactions]
            if len(set(ids)) != len(ids):
                raise RemoteMirrorError("Remote ledger repeats a transaction id.")
        except Exception as e:
            logger.error(f"Failed to load transactions from remote mirror: {e}", exc_info=True)
            return None

        logger.info(f"Loaded {len(transactions)} transactions from remote mirror")
        return transactions

    def insert(self, txn: Transaction) -> bool:
        """Write-through for a committed local add. Returns whether it landed."""
        client = self.client
        if client is None:
            return False
        try:
            client.insert_one(txn.id, to_remote_record(txn))
        except Exception as e:
            logger.error(f"Failed to mirror transaction {txn.id}: {e}", exc_info=True)
            return False
        logger.info(f"Mirrored transaction {txn.id} to remote store")
        return True

    def delete(self, txn_id: str) -> bool:
        """Write-through for a committed local removal. Returns whether it landed."""
        client = self.client
        if client is None:
            return False
        try:
            client.delete_by_id(txn_id)
        except Exception as e:
            logger.error(f"Failed to delete transaction {txn_id} from remote mirror: {e}", exc_info=True)
            return False
        logger.info(f"Deleted transaction {txn_id} from remote store")
        return True
