"""Azure Key Vault key store.

Secrets are stored one per service principal under the name
``sp-{client_id}-{tenant_id}``, restricted to the characters Key Vault
accepts in secret names.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from azure.core.exceptions import ResourceNotFoundError
from azure.keyvault.secrets import SecretClient
from pydantic import SecretStr

from ..errors import CredentialNotFoundError
from .secrets import decrypt, protect

logger = logging.getLogger(__name__)


def secret_name(client_id: str, tenant_id: str) -> str:
    """Key Vault secret names allow only alphanumerics and dashes."""
    name = f"sp-{client_id}-{tenant_id}"
    return re.sub(r"[^0-9A-Za-z-]", "-", name)


class KeyVaultKeyStore:
    """Key store backed by an Azure Key Vault.

    The vault is reached with ``DefaultAzureCredential`` unless a credential
    or a ready-made ``SecretClient`` is passed in.
    """

    def __init__(
        self,
        vault_url: str,
        credential: Any = None,
        client: Optional[SecretClient] = None,
    ) -> None:
        self.vault_url = vault_url
        if client is None:
            if credential is None:
                from azure.identity import DefaultAzureCredential

                credential = DefaultAzureCredential()
            client = SecretClient(vault_url=vault_url, credential=credential)
        self._client = client

    def get_key(self, client_id: str, tenant_id: str) -> SecretStr:
        name = secret_name(client_id, tenant_id)
        try:
            secret = self._client.get_secret(name)
        except ResourceNotFoundError as e:
            raise CredentialNotFoundError(client_id, tenant_id) from e
        if not secret.value:
            raise CredentialNotFoundError(client_id, tenant_id)
        return SecretStr(secret.value)

    def add_key(self, client_id: str, tenant_id: str, secret: str | SecretStr) -> None:
        name = secret_name(client_id, tenant_id)
        self._client.set_secret(
            name,
            decrypt(protect(secret)),
            content_type="text/plain",
            tags={"client_id": client_id, "tenant_id": tenant_id},
        )
        logger.info("Stored secret %s in %s", name, self.vault_url)

    def delete_key(self, client_id: str, tenant_id: str) -> bool:
        name = secret_name(client_id, tenant_id)
        try:
            self._client.begin_delete_secret(name)
        except ResourceNotFoundError:
            return False
        logger.info("Deleted secret %s from %s", name, self.vault_url)
        return True
