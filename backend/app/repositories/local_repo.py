import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import MalformedLedgerError
from app.core.logging import get_logger
from app.schemas.models import RemoteConfig, Transaction

logger = get_logger("rideledger.repositories.local")

CONFIG_KEY = "endpointConfig"
LEDGER_KEY = "transactionLedger"


class LocalRepository:
    """Client-scoped key-value persistence; each key is one JSON file."""

    def __init__(self, base_dir: Path | None = None) -> None:
        root = base_dir or Path(__file__).resolve().parents[3] / "data"
        self.data_dir = root
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: Any) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)

    def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def save_transactions(self, transactions: list[Transaction]) -> None:
        self.set_item(LEDGER_KEY, [txn.model_dump(mode="json") for txn in transactions])

    def load_transactions(self) -> list[Transaction]:
        try:
            raw = self.get_item(LEDGER_KEY)
        except UnicodeDecodeError as e:
            raise MalformedLedgerError(f"Ledger payload is not UTF-8: {e}") from e
        if raw is None:
            return []
        return decode_ledger(raw)

    def save_remote_config(self, config: RemoteConfig) -> None:
        self.set_item(CONFIG_KEY, config.model_dump())

    def load_remote_config(self) -> RemoteConfig | None:
        try:
            raw = self.get_item(CONFIG_KEY)
            if raw is None:
                return None
            return RemoteConfig.model_validate_json(raw)
        except (UnicodeDecodeError, PydanticValidationError):
            logger.warning("Ignoring unreadable remote config in %s", self._path(CONFIG_KEY))
            return None


def decode_ledger(raw: str) -> list[Transaction]:
    """Decode a persisted ledger payload, raising MalformedLedgerError on any defect."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedLedgerError(f"Ledger payload is not JSON: {e}", raw_payload=raw) from e

    if payload is None:
        return []
    if not isinstance(payload, list):
        raise MalformedLedgerError("Ledger payload must be a list.", raw_payload=raw)

    try:
        transactions = [Transaction.model_validate(item) for item in payload]
    except PydanticValidationError as e:
        raise MalformedLedgerError(
            "Ledger payload holds an invalid transaction.",
            raw_payload=raw,
            details={"errors": e.error_count()},
        ) from e

    if len({txn.id for txn in transactions}) != len(transactions):
        raise MalformedLedgerError("Ledger payload repeats a transaction id.", raw_payload=raw)
    return transactions
