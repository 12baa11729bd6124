"""Pytest fixtures and configuration."""

from __future__ import annotations

import datetime as dt
import os
from decimal import Decimal
from pathlib import Path
from typing import Any, Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Keep test runs independent of a developer's .env
os.environ.setdefault("LEDGER_REMOTE_ENDPOINT", "")
os.environ.setdefault("LEDGER_REMOTE_KEY", "")

from app.core.config import Settings
from app.repositories.local_repo import LocalRepository
from app.schemas.models import Category, TransactionCreate, TransactionType
from app.services.ledger_service import LedgerService
from app.services.ledger_store import LocalStore
from app.services.remote_mirror import RemoteMirror


@pytest.fixture
def fuel_expense() -> TransactionCreate:
    return TransactionCreate(
        type=TransactionType.EXPENSE,
        category=Category.FUEL,
        amount=Decimal("50.00"),
        date=dt.date(2024, 1, 10),
    )


@pytest.fixture
def ride_income() -> TransactionCreate:
    return TransactionCreate(
        type=TransactionType.INCOME,
        category=Category.RIDE,
        description="Airport run",
        amount=Decimal("120.00"),
        date=dt.date(2024, 1, 11),
    )


@pytest.fixture
def remote_rows() -> list[tuple[str, dict[str, Any]]]:
    """Remote rows as the Firestore client returns them, newest date first."""
    return [
        (
            "1704974400000",
            {"tipo": "entrada", "categoria": "corrida", "descricao": "", "valor": 80.5, "data": "2024-01-11"},
        ),
        (
            "1704888000000",
            {"type": "expense", "category": "parking", "description": "Mall", "amount": 12, "date": "2024-01-10"},
        ),
    ]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def repository(settings: Settings) -> LocalRepository:
    return LocalRepository(settings.data_dir)


@pytest.fixture
def store(repository: LocalRepository) -> LocalStore:
    return LocalStore(repository)


@pytest.fixture
def remote_client() -> MagicMock:
    """Mock remote table client; never touches the network."""
    client = MagicMock()
    client.select_all_ordered_by_date_desc.return_value = []
    return client


@pytest.fixture
def client_factory(remote_client: MagicMock) -> MagicMock:
    return MagicMock(return_value=remote_client)


@pytest.fixture
def mirror(client_factory: MagicMock) -> RemoteMirror:
    return RemoteMirror(client_factory)


@pytest.fixture
def service(store: LocalStore, mirror: RemoteMirror, settings: Settings) -> LedgerService:
    return LedgerService(store, mirror, settings)


@pytest.fixture
def test_client(settings: Settings, service: LedgerService) -> Generator[TestClient, None, None]:
    """Test client over an app whose ledger uses the mocked remote client."""
    from app.main import create_app

    app = create_app(settings, ledger=service)
    with TestClient(app) as client:
        yield client
