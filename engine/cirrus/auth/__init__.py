"""Application authentication — key stores, token acquisition, credential provider."""

from .keystore import (
    EnvironmentKeyStore,
    InMemoryKeyStore,
    ServicePrincipalKeyStore,
    create_key_store,
)
from .provider import ApplicationTokenCredential, KeyStoreApplicationCredentialProvider
from .secrets import decrypt, protect
from .token import ClientSecretTokenAcquirer, TokenAcquirer, effective_scopes

__all__ = [
    "ApplicationTokenCredential",
    "ClientSecretTokenAcquirer",
    "EnvironmentKeyStore",
    "InMemoryKeyStore",
    "KeyStoreApplicationCredentialProvider",
    "ServicePrincipalKeyStore",
    "TokenAcquirer",
    "create_key_store",
    "decrypt",
    "effective_scopes",
    "protect",
]
