"""Service principal key stores.

A key store hands out the client secret for an application in a tenant
as a ``SecretStr``. Stores are looked up synchronously; the credential
provider moves the lookup onto a worker thread.
"""

from __future__ import annotations

import logging
import os
import re
from threading import Lock
from typing import Optional, Protocol, runtime_checkable

from pydantic import SecretStr

from ..errors import CredentialNotFoundError, UnknownKeyStoreError
from .secrets import protect

logger = logging.getLogger(__name__)


@runtime_checkable
class ServicePrincipalKeyStore(Protocol):
    """Read access to client secrets keyed by (client_id, tenant_id)."""

    def get_key(self, client_id: str, tenant_id: str) -> SecretStr:
        """Return the secret, or raise ``CredentialNotFoundError``."""
        ...


def make_key(client_id: str, tenant_id: str) -> str:
    return f"{client_id}_{tenant_id}"


class InMemoryKeyStore:
    """Process-local key store.

    Secrets only live as long as the process; useful for tests and for
    hosts that receive the secret interactively.
    """

    def __init__(self) -> None:
        self._keys: dict[str, SecretStr] = {}
        self._lock = Lock()

    def add_key(self, client_id: str, tenant_id: str, secret: str | SecretStr) -> None:
        with self._lock:
            self._keys[make_key(client_id, tenant_id)] = protect(secret)

    def get_key(self, client_id: str, tenant_id: str) -> SecretStr:
        with self._lock:
            key = self._keys.get(make_key(client_id, tenant_id))
        if key is None:
            raise CredentialNotFoundError(client_id, tenant_id)
        return key

    def delete_key(self, client_id: str, tenant_id: str) -> bool:
        with self._lock:
            return self._keys.pop(make_key(client_id, tenant_id), None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


class EnvironmentKeyStore:
    """Read-only key store backed by environment variables.

    The variable name is ``{prefix}{CLIENT_ID}_{TENANT_ID}_SECRET`` with both
    identifiers upper-cased and every non-alphanumeric character replaced by
    an underscore.
    """

    def __init__(self, prefix: str = "CIRRUS_SP_") -> None:
        self.prefix = prefix

    def variable_name(self, client_id: str, tenant_id: str) -> str:
        return f"{self.prefix}{_env_token(client_id)}_{_env_token(tenant_id)}_SECRET"

    def get_key(self, client_id: str, tenant_id: str) -> SecretStr:
        name = self.variable_name(client_id, tenant_id)
        value = os.getenv(name)
        if not value:
            logger.debug("Environment variable %s not set", name)
            raise CredentialNotFoundError(client_id, tenant_id)
        return SecretStr(value)


def _env_token(value: str) -> str:
    return re.sub(r"[^A-Z0-9]", "_", value.upper())


def create_key_store(
    kind: Optional[str] = None,
    env_prefix: Optional[str] = None,
    vault_url: Optional[str] = None,
) -> ServicePrincipalKeyStore:
    """Create a key store.

    Args:
        kind: "memory", "environment" or "keyvault". Defaults to
              ``settings.key_store``.
        env_prefix: Variable prefix for the environment store. Defaults to
                    ``settings.key_store_env_prefix``.
        vault_url: Vault URL for the Key Vault store. Defaults to
                   ``settings.key_vault_url``.
    """
    from ..config import settings

    kind = (kind or settings.key_store).lower()

    if kind == "memory":
        return InMemoryKeyStore()
    if kind == "environment":
        return EnvironmentKeyStore(prefix=env_prefix if env_prefix is not None else settings.key_store_env_prefix)
    if kind == "keyvault":
        from .keyvault import KeyVaultKeyStore

        vault_url = vault_url or settings.key_vault_url
        if not vault_url:
            raise ValueError("CIRRUS_KEY_VAULT_URL must be set to use the keyvault key store")
        return KeyVaultKeyStore(vault_url)
    raise UnknownKeyStoreError(kind)
