"""Tests for the Azure SQL server adapter (mocked management client)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest
from azure.core.exceptions import HttpResponseError
from pydantic import SecretStr

from cirrus.errors import RemoteOperationFailed
from cirrus.providers.azure.communicator import REQUEST_ID_HEADER, SqlClientFactory
from cirrus.providers.azure.sql_server import SqlServerAdapter, SqlServerModel, build_sql_server_adapter
from cirrus.services.resilience import error_tracker


def make_server(name: str, location: str = "westeurope", version: str = "12.0",
                admin: str = "sqladmin", tags: dict | None = None) -> SimpleNamespace:
    """Stand-in for an ``azure.mgmt.sql.models.Server`` response."""
    return SimpleNamespace(
        name=name,
        location=location,
        version=version,
        administrator_login=admin,
        tags=tags,
        fully_qualified_domain_name=f"{name}.database.windows.net",
    )


class TestSqlServerAdapter:
    """Adapter calls against a mocked SqlManagementClient."""

    def _make_adapter(self) -> tuple[SqlServerAdapter, MagicMock, list[str]]:
        client = MagicMock()
        correlation_ids: list[str] = []

        def factory(correlation_id: str) -> MagicMock:
            correlation_ids.append(correlation_id)
            return client

        return SqlServerAdapter(factory), client, correlation_ids

    def test_types(self):
        adapter, _, _ = self._make_adapter()
        assert adapter.provider_type == "azure"
        assert adapter.resource_type == "sql_server"

    def test_get_server(self):
        adapter, client, _ = self._make_adapter()
        client.servers.get.return_value = make_server("sql-1", tags={"env": "dev"})

        server = adapter.get_server("rg-1", "sql-1")

        client.servers.get.assert_called_once_with("rg-1", "sql-1")
        assert server.resource_group_name == "rg-1"
        assert server.server_name == "sql-1"
        assert server.server_version == "12.0"
        assert server.sql_admin_user_name == "sqladmin"
        assert server.location == "westeurope"
        assert server.tags == {"env": "dev"}
        assert server.sql_admin_password is None

    def test_list_servers(self):
        adapter, client, _ = self._make_adapter()
        client.servers.list_by_resource_group.return_value = iter(
            [make_server("sql-1"), make_server("sql-2", location="eastus")]
        )

        servers = adapter.list_servers("rg-1")

        assert [s.server_name for s in servers] == ["sql-1", "sql-2"]
        assert all(s.resource_group_name == "rg-1" for s in servers)
        assert servers[1].location == "eastus"

    def test_upsert_decrypts_password_at_call(self):
        adapter, client, _ = self._make_adapter()
        client.servers.begin_create_or_update.return_value.result.return_value = make_server("sql-1")
        model = SqlServerModel(
            resource_group_name="rg-1",
            server_name="sql-1",
            location="westeurope",
            server_version="12.0",
            sql_admin_user_name="sqladmin",
            sql_admin_password=SecretStr("P@ssw0rd!"),
        )

        result = adapter.upsert_server(model)

        rg, name, params = client.servers.begin_create_or_update.call_args.args
        assert (rg, name) == ("rg-1", "sql-1")
        assert params.administrator_login_password == "P@ssw0rd!"
        assert params.administrator_login == "sqladmin"
        assert params.version == "12.0"
        assert params.location == "westeurope"
        assert result.server_name == "sql-1"
        assert result.sql_admin_password is None

    def test_remove_does_not_wait(self):
        adapter, client, _ = self._make_adapter()

        assert adapter.remove_server("rg-1", "sql-1") is None

        client.servers.begin_delete.assert_called_once_with("rg-1", "sql-1")
        client.servers.begin_delete.return_value.result.assert_not_called()

    def test_each_call_gets_new_correlation_id(self):
        adapter, client, correlation_ids = self._make_adapter()
        client.servers.get.return_value = make_server("sql-1")

        adapter.get_server("rg-1", "sql-1")
        adapter.get_server("rg-1", "sql-1")

        assert len(correlation_ids) == 2
        assert correlation_ids[0] != correlation_ids[1]

    def test_remote_failure_propagates_unmodified(self):
        adapter, client, _ = self._make_adapter()
        error = HttpResponseError(message="ResourceNotFound: server sql-9 not found")
        client.servers.get.side_effect = error

        with pytest.raises(RemoteOperationFailed) as exc_info:
            adapter.get_server("rg-1", "sql-9")

        assert exc_info.value is error
        tracked = error_tracker.get_errors(source="provider.azure")
        assert tracked[0]["context"]["operation"] == "get"


class TestSqlServerModel:
    def test_round_trip_preserves_fields(self):
        model = SqlServerModel(
            resource_group_name="rg-1",
            server_name="sql-1",
            location="westeurope",
            server_version="12.0",
            sql_admin_user_name="sqladmin",
            sql_admin_password=SecretStr("pw"),
        )

        wire = model.to_server()
        wire.name = model.server_name
        back = SqlServerModel.from_server(model.resource_group_name, wire)

        for field in ("resource_group_name", "server_name", "server_version", "sql_admin_user_name", "location"):
            assert getattr(back, field) == getattr(model, field)

    def test_password_hidden_in_repr(self):
        model = SqlServerModel(resource_group_name="rg", server_name="s", sql_admin_password=SecretStr("hunter2"))
        assert "hunter2" not in repr(model)
        assert "hunter2" not in model.model_dump_json()

    def test_no_password_sends_none(self):
        model = SqlServerModel(resource_group_name="rg", server_name="s", location="eastus")
        assert model.to_server().administrator_login_password is None


class TestSqlClientFactory:
    def test_requires_subscription(self):
        with pytest.raises(ValueError):
            SqlClientFactory(MagicMock(), "")

    def test_client_tagged_with_correlation_id(self):
        credential = MagicMock()
        with patch("cirrus.providers.azure.communicator.SqlManagementClient") as cls:
            SqlClientFactory(credential, "sub-1")("cid-1")
        cls.assert_called_once_with(credential, "sub-1", headers={REQUEST_ID_HEADER: "cid-1"})

    def test_build_adapter(self):
        with patch("cirrus.providers.azure.communicator.SqlManagementClient") as cls:
            cls.return_value.servers.get.return_value = make_server("sql-1")
            adapter = build_sql_server_adapter(MagicMock(), "sub-1")
            assert adapter.get_server("rg-1", "sql-1").server_name == "sql-1"
