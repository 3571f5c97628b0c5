"""Application credential provider backed by a service principal key store."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from azure.core.credentials import AccessToken

from ..common import redact
from ..errors import AuthenticationRejectedError, KeyStoreNotConfiguredError
from ..services.resilience import error_tracker
from .keystore import ServicePrincipalKeyStore
from .secrets import protect
from .token import ClientSecretTokenAcquirer, TokenAcquirer

logger = logging.getLogger(__name__)


class KeyStoreApplicationCredentialProvider:
    """Authenticates an application with the secret held for it in a key store.

    The caller never handles the secret: it is read from the key store,
    exposed only for the duration of the token exchange, and dropped
    afterwards. Neither the secret nor the token is cached here.
    """

    def __init__(
        self,
        tenant_id: str,
        key_store: Optional[ServicePrincipalKeyStore] = None,
        token_acquirer: Optional[TokenAcquirer] = None,
        scopes: Sequence[str] = (),
    ) -> None:
        self._tenant_id = tenant_id
        self._key_store = key_store
        self._token_acquirer = token_acquirer or ClientSecretTokenAcquirer(tenant_id)
        self._scopes = tuple(scopes)

    @property
    def tenant_id(self) -> str:
        return self._tenant_id

    @property
    def key_store(self) -> Optional[ServicePrincipalKeyStore]:
        return self._key_store

    async def authenticate(self, client_id: str, audience: str) -> AccessToken:
        """Exchange the stored secret for *client_id* for an access token.

        Raises:
            ValueError: ``client_id`` or ``audience`` is empty.
            KeyStoreNotConfiguredError: the provider was built without a key store.
            CredentialNotFoundError: the key store has no secret for the client.
            AuthenticationRejectedError: the identity provider refused the exchange.
        """
        if not client_id:
            raise ValueError("client_id must be a non-empty string")
        if not audience:
            raise ValueError("audience must be a non-empty string")
        if self._key_store is None:
            raise KeyStoreNotConfiguredError()

        key = protect(await asyncio.to_thread(self._key_store.get_key, client_id, self._tenant_id))
        logger.debug("Retrieved key for client %s in tenant %s", client_id, self._tenant_id)

        rejected: Optional[AuthenticationRejectedError] = None
        secret = key.get_secret_value()
        try:
            token = await asyncio.to_thread(
                self._token_acquirer.acquire_token_for_client,
                client_id,
                audience,
                secret,
                list(self._scopes),
            )
        except AuthenticationRejectedError as e:
            error_tracker.record("auth", e, client_id=client_id, tenant_id=self._tenant_id)
            logger.warning("Token request for client %s rejected: %s", client_id, e)
            raise
        except Exception as e:
            if not (secret and secret in str(e)):
                raise
            rejected = AuthenticationRejectedError(redact(str(e), secret))
        finally:
            # Tracebacks keep this frame alive; the plain value must not outlive the call.
            del secret

        # Raised outside the handler so the unredacted error is not chained as __context__.
        if rejected is not None:
            error_tracker.record("auth", rejected, client_id=client_id, tenant_id=self._tenant_id)
            raise rejected

        logger.info("Acquired token for client %s (audience %s)", client_id, audience)
        return token


class ApplicationTokenCredential:
    """``azure-core`` ``TokenCredential`` for a fixed client id.

    Lets management clients authenticate through a key-store provider.
    The first requested scope is used as the audience. ``get_token`` runs
    its own event loop, so it must not be called from inside a running one.
    """

    def __init__(self, provider: KeyStoreApplicationCredentialProvider, client_id: str) -> None:
        self._provider = provider
        self._client_id = client_id

    def get_token(self, *scopes: str, **kwargs: Any) -> AccessToken:
        if not scopes:
            raise ValueError("get_token requires at least one scope")
        return asyncio.run(self._provider.authenticate(self._client_id, scopes[0]))

    def close(self) -> None:
        pass

    def __enter__(self) -> "ApplicationTokenCredential":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
