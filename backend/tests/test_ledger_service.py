"""Unit tests for LedgerService."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from app.core.config import Settings
from app.core.exceptions import ConfigurationError, ValidationError
from app.repositories.local_repo import LocalRepository
from app.schemas.models import RemoteConfig
from app.services.ledger_service import LedgerService
from app.services.ledger_store import LocalStore
from app.services.remote_mirror import RemoteMirror

CONFIG = RemoteConfig(endpoint="ride-ledger-prod", key="/secrets/sa.json")


class TestStart:
    def test_without_config_uses_local_storage(self, service: LedgerService, store: LocalStore, client_factory, fuel_expense):
        committed = store.add(fuel_expense)
        store.replace([])

        loaded = service.start()

        assert [t.id for t in loaded] == [committed.id]
        client_factory.assert_not_called()

    def test_saved_config_hydrates_from_remote(
        self, service: LedgerService, repository: LocalRepository, remote_client, remote_rows
    ):
        repository.save_remote_config(CONFIG)
        remote_client.select_all_ordered_by_date_desc.return_value = remote_rows

        service.start()

        assert [t.id for t in service.list_transactions()] == ["1704974400000", "1704888000000"]
        remote_client.select_all_ordered_by_date_desc.assert_called_once()

    def test_environment_config_used_as_fallback(self, store: LocalStore, mirror: RemoteMirror, client_factory, tmp_path):
        settings = Settings(data_dir=tmp_path, remote_endpoint="env-project", remote_key="/env/sa.json")
        LedgerService(store, mirror, settings).start()
        client_factory.assert_called_once_with(RemoteConfig(endpoint="env-project", key="/env/sa.json"))

    def test_remote_read_failure_uses_local_verbatim(
        self, service: LedgerService, store: LocalStore, repository: LocalRepository, remote_client, fuel_expense, ride_income
    ):
        store.add(fuel_expense)
        store.add(ride_income)
        persisted = repository.load_transactions()
        store.replace([])
        repository.save_remote_config(CONFIG)
        remote_client.select_all_ordered_by_date_desc.side_effect = ConnectionError("offline")

        service.start()

        assert service.list_transactions() == persisted

    def test_undecodable_config_treated_as_absent(
        self, service: LedgerService, repository: LocalRepository, client_factory
    ):
        (repository.data_dir / "endpointConfig.json").write_bytes(b"\xff\xfe{\x80}")

        assert service.start() == []
        assert service.mirror.configured is False
        client_factory.assert_not_called()

    def test_bad_credentials_at_startup_leave_mirror_inert(
        self, service: LedgerService, repository: LocalRepository, client_factory
    ):
        repository.save_remote_config(CONFIG)
        client_factory.side_effect = ConfigurationError("bad key")

        assert service.start() == []
        assert service.mirror.configured is False


class TestAdd:
    def test_unconfigured_mirror_never_dispatched(self, service: LedgerService, repository: LocalRepository, fuel_expense):
        dispatch = MagicMock()
        txn = service.add(fuel_expense, dispatch=dispatch)

        dispatch.assert_not_called()
        assert repository.load_transactions() == [txn]

    def test_mirror_write_dispatched_after_local_commit(
        self, service: LedgerService, repository: LocalRepository, ride_income
    ):
        service.mirror.configure(CONFIG)
        seen_at_dispatch = []

        def dispatch(func, *args):
            seen_at_dispatch.append([t.id for t in repository.load_transactions()])
            func(*args)

        txn = service.add(ride_income, dispatch=dispatch)

        assert seen_at_dispatch == [[txn.id]]
        service.mirror.client.insert_one.assert_called_once()

    def test_remote_failure_does_not_roll_back(self, service: LedgerService, remote_client, ride_income):
        service.mirror.configure(CONFIG)
        remote_client.insert_one.side_effect = ConnectionError("offline")

        txn = service.add(ride_income)

        assert service.list_transactions() == [txn]
        assert service.totals().income == Decimal("120.00")

    def test_stores_diverge_silently_when_mirror_write_fails(
        self, service: LedgerService, remote_client, fuel_expense, ride_income
    ):
        # Known property: no reconciliation, the remote copy just misses the row.
        service.mirror.configure(CONFIG)
        remote_client.insert_one.side_effect = [None, ConnectionError("offline")]

        first = service.add(fuel_expense)
        second = service.add(ride_income)

        assert [t.id for t in service.list_transactions()] == [second.id, first.id]
        attempted = [c.args[0] for c in remote_client.insert_one.call_args_list]
        assert attempted == [first.id, second.id]

    @pytest.mark.parametrize("missing", ["type", "category", "amount", "date"])
    def test_missing_required_field_rejected_before_mutation(self, service: LedgerService, repository: LocalRepository, missing):
        data = {"type": "income", "category": "ride", "amount": "10", "date": "2024-01-11"}
        data.pop(missing)

        with pytest.raises(ValidationError) as exc_info:
            service.add(data)

        assert missing in exc_info.value.details["fields"]
        assert service.list_transactions() == []
        assert repository.get_item("transactionLedger") is None

    def test_zero_amount_rejected(self, service: LedgerService):
        with pytest.raises(ValidationError):
            service.add({"type": "expense", "category": "fuel", "amount": 0, "date": "2024-01-10"})

    def test_blank_description_becomes_none(self, service: LedgerService):
        txn = service.add({"type": "expense", "category": "fuel", "description": "  ", "amount": 5, "date": "2024-01-10"})
        assert txn.description is None


class TestRemove:
    def test_remove_dispatches_remote_delete(self, service: LedgerService, remote_client, fuel_expense):
        service.mirror.configure(CONFIG)
        txn = service.add(fuel_expense)

        assert service.remove(txn.id) is True
        assert service.remove(txn.id) is False
        assert remote_client.delete_by_id.call_count == 2
        assert service.list_transactions() == []

    def test_unconfigured_remove_is_local_only(self, service: LedgerService, fuel_expense):
        dispatch = MagicMock()
        txn = service.add(fuel_expense, dispatch=dispatch)
        service.remove(txn.id, dispatch=dispatch)
        dispatch.assert_not_called()


class TestConfigureRemote:
    def test_blank_fields_rejected_and_not_persisted(self, service: LedgerService, repository: LocalRepository):
        with pytest.raises(ValidationError):
            service.configure_remote({"endpoint": "  ", "key": "/secrets/sa.json"})
        assert repository.load_remote_config() is None
        assert service.mirror.configured is False

    def test_saves_connects_and_rehydrates(
        self, service: LedgerService, repository: LocalRepository, remote_client, remote_rows
    ):
        remote_client.select_all_ordered_by_date_desc.return_value = remote_rows

        status = service.configure_remote({"endpoint": " ride-ledger-prod ", "key": "/secrets/sa.json"})

        assert status.configured is True
        assert status.endpoint == "ride-ledger-prod"
        assert repository.load_remote_config() == CONFIG
        assert len(service.list_transactions()) == 2

    def test_client_failure_surfaces_configuration_error(self, service: LedgerService, client_factory):
        client_factory.side_effect = ConfigurationError("bad key")
        with pytest.raises(ConfigurationError):
            service.configure_remote(CONFIG)
        assert service.remote_status().configured is False
