from __future__ import annotations

from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, ValidationError
from app.core.logging import LogContext, get_logger
from app.repositories.firestore_repo import FirestoreRepository
from app.repositories.local_repo import LocalRepository
from app.schemas.models import (
    LedgerView,
    RemoteConfig,
    RemoteConfigStatus,
    Totals,
    Transaction,
    TransactionCreate,
)
from app.services.ledger_store import LocalStore
from app.services.remote_mirror import RemoteMirror
from app.services.rendering import render_ledger

logger = get_logger("rideledger.services.ledger")

# Same shape as BackgroundTasks.add_task: dispatch(func, *args)
Dispatch = Callable[..., Any]


def run_now(func: Callable[..., Any], *args: Any) -> None:
    func(*args)


class LedgerService:
    """Ties the local store and the remote mirror together.

    Mutations commit to the local store synchronously and return. The matching
    mirror write is handed to ``dispatch`` afterwards and its outcome is only
    logged, so callers never wait on or observe the remote store. Routes pass
    ``BackgroundTasks.add_task`` so the mirror write starts after the response
    has been sent.
    """

    def __init__(
        self,
        store: LocalStore,
        mirror: RemoteMirror,
        settings: Settings,
        dispatch: Dispatch = run_now,
    ) -> None:
        self.store = store
        self.mirror = mirror
        self.settings = settings
        self.dispatch = dispatch

    @classmethod
    def from_settings(cls, settings: Settings) -> "LedgerService":
        repository = LocalRepository(settings.data_dir)

        def build_client(config: RemoteConfig) -> FirestoreRepository:
            return FirestoreRepository(
                config.endpoint,
                config.key,
                collection=settings.remote_collection,
            )

        return cls(LocalStore(repository), RemoteMirror(build_client), settings)

    @property
    def repository(self) -> LocalRepository:
        return self.store.repository

    def start(self) -> list[Transaction]:
        """Configure the mirror from saved or environment credentials, then hydrate."""
        config = self.repository.load_remote_config() or self._env_remote_config()
        if config is not None:
            try:
                self.mirror.configure(config)
            except ConfigurationError as e:
                logger.warning(f"Remote mirror disabled at startup: {e.message}")
        return self.hydrate()

    def hydrate(self) -> list[Transaction]:
        """Fill the store from the mirror, falling back to local storage on any failure."""
        with LogContext(logger, "ledger hydration", remote=self.mirror.configured) as ctx:
            remote = self.mirror.fetch_all()
            if remote is None:
                loaded = self.store.load()
                ctx.record(source="local", transactions=len(loaded))
                return loaded
            self.store.replace(remote)
            ctx.record(source="remote", transactions=len(remote))
            return remote

    def add(self, data: TransactionCreate | dict[str, Any], dispatch: Dispatch | None = None) -> Transaction:
        """Validate and commit a new transaction, then dispatch its mirror write.

        Raises:
            ValidationError: If a required field is missing or invalid; nothing is stored
        """
        draft = self._validate(data)
        txn = self.store.add(draft)
        if self.mirror.configured:
            (dispatch or self.dispatch)(self.mirror.insert, txn)
        return txn

    def remove(self, txn_id: str, dispatch: Dispatch | None = None) -> bool:
        removed = self.store.remove(txn_id)
        if self.mirror.configured:
            (dispatch or self.dispatch)(self.mirror.delete, txn_id)
        return removed

    def list_transactions(self) -> list[Transaction]:
        return self.store.transactions

    def totals(self) -> Totals:
        return self.store.totals()

    def view(self) -> LedgerView:
        return render_ledger(self.store.transactions, self.settings.currency_symbol)

    def remote_status(self) -> RemoteConfigStatus:
        return RemoteConfigStatus(
            configured=self.mirror.configured,
            endpoint=self.mirror.endpoint,
            collection=self.settings.remote_collection,
        )

    def configure_remote(self, data: RemoteConfig | dict[str, Any]) -> RemoteConfigStatus:
        """Persist new remote credentials, rebuild the client and re-hydrate.

        Raises:
            ValidationError: If endpoint or key is blank; nothing is persisted
            ConfigurationError: If the client cannot be built; the mirror stays inert
        """
        if isinstance(data, RemoteConfig):
            config = data
        else:
            try:
                config = RemoteConfig.model_validate(data)
            except PydanticValidationError as e:
                raise ValidationError(
                    "Both endpoint and key are required.",
                    details={"errors": e.error_count()},
                ) from e

        self.repository.save_remote_config(config)
        self.mirror.configure(config)
        self.hydrate()
        return self.remote_status()

    def _env_remote_config(self) -> RemoteConfig | None:
        if not (self.settings.remote_endpoint and self.settings.remote_key):
            return None
        return RemoteConfig(endpoint=self.settings.remote_endpoint, key=self.settings.remote_key)

    @staticmethod
    def _validate(data: TransactionCreate | dict[str, Any]) -> TransactionCreate:
        if isinstance(data, TransactionCreate):
            return data
        try:
            return TransactionCreate.model_validate(data)
        except PydanticValidationError as e:
            missing = sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})
            raise ValidationError(
                "Please fill in all required fields.",
                details={"fields": missing},
            ) from e
