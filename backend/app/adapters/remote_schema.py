"""
Remote Schema Adapter

Translates between the canonical in-memory Transaction and the record shape
of the remote ``transacoes`` table. This is the only place that knows about
the remote field names and value vocabulary.

Remote record:
    tipo       - "entrada" | "saida"
    categoria  - "corrida" | "combustivel" | ... (see CATEGORY_TO_REMOTE)
    descricao  - free text
    valor      - non-negative number
    data       - ISO date string (YYYY-MM-DD)

Older rows written before the rename carry ``type``/``category``/
``description``/``amount``/``date`` and the English vocabulary; reads accept
both generations.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import RemoteMirrorError
from app.schemas.models import Category, Transaction, TransactionType

FIELD_MAP = {
    "type": "tipo",
    "category": "categoria",
    "description": "descricao",
    "amount": "valor",
    "date": "data",
}

TYPE_TO_REMOTE = {
    TransactionType.INCOME: "entrada",
    TransactionType.EXPENSE: "saida",
}

CATEGORY_TO_REMOTE = {
    Category.RIDE: "corrida",
    Category.FUEL: "combustivel",
    Category.MAINTENANCE: "manutencao",
    Category.FOOD: "alimentacao",
    Category.PARKING: "estacionamento",
    Category.CAR_WASH: "lavagem",
    Category.OTHER: "outros",
}

_TYPE_FROM_REMOTE = {value: key for key, value in TYPE_TO_REMOTE.items()}
_TYPE_FROM_REMOTE.update({"saída": TransactionType.EXPENSE})
_CATEGORY_FROM_REMOTE = {value: key for key, value in CATEGORY_TO_REMOTE.items()}


def to_remote_record(txn: Transaction) -> dict[str, Any]:
    """Map a Transaction onto the remote column names and vocabulary."""
    return {
        FIELD_MAP["type"]: TYPE_TO_REMOTE[txn.type],
        FIELD_MAP["category"]: CATEGORY_TO_REMOTE[txn.category],
        FIELD_MAP["description"]: txn.description or "",
        # Firestore has no decimal type
        FIELD_MAP["amount"]: float(txn.amount),
        FIELD_MAP["date"]: txn.date.isoformat(),
    }


def from_remote_record(record_id: str | None, record: dict[str, Any]) -> Transaction:
    """Normalize one remote row into a Transaction.

    Args:
        record_id: Remote document id; falls back to an ``id`` field in the row
        record: Raw remote row

    Returns:
        Canonical Transaction

    Raises:
        RemoteMirrorError: If the row cannot be interpreted
    """
    if not isinstance(record, dict):
        raise RemoteMirrorError(f"Remote record {record_id!r} is not a mapping.")

    txn_id = record_id or record.get("id")
    if txn_id in (None, ""):
        raise RemoteMirrorError("Remote record has no id.", details={"record": record})

    try:
        return Transaction(
            id=str(txn_id),
            type=_parse_type(_pick(record, "type")),
            category=_parse_category(_pick(record, "category")),
            description=_pick(record, "description") or None,
            amount=_parse_amount(_pick(record, "amount")),
            date=_parse_date(_pick(record, "date")),
        )
    except (PydanticValidationError, ValueError, TypeError) as e:
        raise RemoteMirrorError(
            f"Remote record {txn_id!r} is malformed: {e}",
            details={"record": record},
        ) from e


def _pick(record: dict[str, Any], local_field: str) -> Any:
    """Return the remote column, falling back to the pre-rename column."""
    value = record.get(FIELD_MAP[local_field])
    if value is None:
        value = record.get(local_field)
    return value


def _parse_type(value: Any) -> TransactionType:
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in _TYPE_FROM_REMOTE:
            return _TYPE_FROM_REMOTE[normalised]
        return TransactionType(normalised)
    raise ValueError(f"Unsupported transaction type: {value!r}")


def _parse_category(value: Any) -> Category:
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in _CATEGORY_FROM_REMOTE:
            return _CATEGORY_FROM_REMOTE[normalised]
        return Category(normalised)
    raise ValueError(f"Unsupported category: {value!r}")


def _parse_amount(value: Any) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Unsupported amount: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Unsupported amount: {value!r}") from e


def _parse_date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        # timestamptz columns come back as full ISO datetimes
        return dt.date.fromisoformat(value[:10])
    raise ValueError(f"Unsupported date: {value!r}")
