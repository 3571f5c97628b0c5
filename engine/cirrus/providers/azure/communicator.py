"""Request-scoped Azure SQL management clients."""

from __future__ import annotations

from typing import Any

from azure.mgmt.sql import SqlManagementClient

REQUEST_ID_HEADER = "x-ms-client-request-id"


class SqlClientFactory:
    """Builds a new ``SqlManagementClient`` per request.

    Each client sends the given correlation id as its client request id so
    that calls can be traced on the service side.
    """

    def __init__(self, credential: Any, subscription_id: str, **client_kwargs: Any) -> None:
        if not subscription_id:
            raise ValueError("subscription_id is required for SQL management calls")
        self.credential = credential
        self.subscription_id = subscription_id
        self._client_kwargs = client_kwargs

    def __call__(self, correlation_id: str) -> SqlManagementClient:
        return SqlManagementClient(
            self.credential,
            self.subscription_id,
            headers={REQUEST_ID_HEADER: correlation_id},
            **self._client_kwargs,
        )
