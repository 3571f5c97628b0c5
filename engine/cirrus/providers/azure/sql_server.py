"""Azure SQL server adapter — get, list, upsert and remove logical servers."""

from __future__ import annotations

import logging
from typing import Any, Optional

from azure.mgmt.sql import SqlManagementClient
from azure.mgmt.sql.models import Server
from pydantic import BaseModel, Field, SecretStr

from ...auth.secrets import decrypt
from ..base import ResourceAdapter

logger = logging.getLogger(__name__)


class SqlServerModel(BaseModel):
    """Local view of an Azure SQL logical server."""

    resource_group_name: str
    server_name: str
    location: str = ""
    server_version: Optional[str] = None
    sql_admin_user_name: Optional[str] = None
    sql_admin_password: Optional[SecretStr] = None
    tags: dict[str, str] = Field(default_factory=dict)
    fully_qualified_domain_name: Optional[str] = None

    @classmethod
    def from_server(cls, resource_group_name: str, server: Server) -> "SqlServerModel":
        """Build a model from a management API response.

        The admin password is never returned by the service, so it stays unset.
        """
        return cls(
            resource_group_name=resource_group_name,
            server_name=server.name,
            location=server.location or "",
            server_version=server.version,
            sql_admin_user_name=server.administrator_login,
            tags=dict(server.tags or {}),
            fully_qualified_domain_name=server.fully_qualified_domain_name,
        )

    def to_server(self) -> Server:
        """Build the create-or-update payload, decrypting the password here."""
        return Server(
            location=self.location,
            tags=self.tags or None,
            administrator_login=self.sql_admin_user_name,
            administrator_login_password=decrypt(self.sql_admin_password),
            version=self.server_version,
        )


class SqlServerAdapter(ResourceAdapter[SqlManagementClient]):
    """Maps ``SqlManagementClient.servers`` onto ``SqlServerModel``."""

    @property
    def provider_type(self) -> str:
        return "azure"

    @property
    def resource_type(self) -> str:
        return "sql_server"

    def get_server(self, resource_group_name: str, server_name: str) -> SqlServerModel:
        server = self._remote_call(
            "get",
            lambda client: client.servers.get(resource_group_name, server_name),
        )
        return SqlServerModel.from_server(resource_group_name, server)

    def list_servers(self, resource_group_name: str) -> list[SqlServerModel]:
        servers = self._remote_call(
            "list",
            lambda client: list(client.servers.list_by_resource_group(resource_group_name)),
        )
        return [SqlServerModel.from_server(resource_group_name, s) for s in servers]

    def upsert_server(self, model: SqlServerModel) -> SqlServerModel:
        """Create the server, or update it if it already exists."""
        server = self._remote_call(
            "upsert",
            lambda client: client.servers.begin_create_or_update(
                model.resource_group_name, model.server_name, model.to_server()
            ).result(),
        )
        logger.info("Upserted SQL server %s/%s", model.resource_group_name, model.server_name)
        return SqlServerModel.from_server(model.resource_group_name, server)

    def remove_server(self, resource_group_name: str, server_name: str) -> None:
        """Start deleting the server without waiting for it to finish."""
        self._remote_call(
            "delete",
            lambda client: client.servers.begin_delete(resource_group_name, server_name),
        )
        logger.info("Delete requested for SQL server %s/%s", resource_group_name, server_name)


def build_sql_server_adapter(credential: Any, subscription_id: str, **client_kwargs: Any) -> SqlServerAdapter:
    from .communicator import SqlClientFactory

    return SqlServerAdapter(SqlClientFactory(credential, subscription_id, **client_kwargs))
