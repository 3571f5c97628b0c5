"""Error taxonomy for credential and management-plane failures."""

from __future__ import annotations

from azure.core.exceptions import HttpResponseError

# Management client failures are not wrapped; callers catch the SDK error.
RemoteOperationFailed = HttpResponseError


class CirrusError(Exception):
    """Base class for engine errors."""


class CredentialNotFoundError(CirrusError, KeyError):
    """Raised when a key store holds no secret for a client/tenant pair."""

    def __init__(self, client_id: str, tenant_id: str) -> None:
        self.client_id = client_id
        self.tenant_id = tenant_id
        super().__init__(f"No credential found for client '{client_id}' in tenant '{tenant_id}'")

    def __str__(self) -> str:
        # KeyError quotes its argument otherwise
        return self.args[0]


class AuthenticationRejectedError(CirrusError):
    """Raised when the identity provider refuses a client-credential exchange.

    ``message`` is the provider's diagnostic text with the client secret
    redacted; ``error_code`` is the provider error code when one was returned.
    """

    def __init__(self, message: str, error_code: str | None = None) -> None:
        self.message = message
        self.error_code = error_code
        detail = f"{message} ({error_code})" if error_code else message
        super().__init__(f"Authentication rejected: {detail}")


class KeyStoreNotConfiguredError(CirrusError):
    """Raised when a credential provider is used without a key store."""

    def __init__(self) -> None:
        super().__init__(
            "No key store configured for this credential provider. "
            "Pass key_store= or build one with create_key_store()."
        )


class UnknownKeyStoreError(CirrusError, ValueError):
    """Raised when an unknown key store kind is requested."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"Unknown key store type: {kind}")
