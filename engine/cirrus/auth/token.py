"""Confidential-client token acquisition."""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol, Sequence

from azure.core.credentials import AccessToken
from azure.core.exceptions import ClientAuthenticationError
from azure.identity import ClientSecretCredential

from ..common import redact
from ..errors import AuthenticationRejectedError

logger = logging.getLogger(__name__)

DEFAULT_SCOPE_SUFFIX = "/.default"

_AADSTS_CODE = re.compile(r"\bAADSTS\d+\b")


class TokenAcquirer(Protocol):
    """Client-credential token exchange."""

    def acquire_token_for_client(
        self,
        client_id: str,
        audience: str,
        client_secret: str,
        scopes: Sequence[str],
    ) -> AccessToken:
        ...


def effective_scopes(audience: str, scopes: Sequence[str]) -> list[str]:
    """Scopes to request: *scopes* if given, else the audience's ``.default`` scope."""
    if scopes:
        return list(scopes)
    if audience.endswith(DEFAULT_SCOPE_SUFFIX):
        return [audience]
    return [audience.rstrip("/") + DEFAULT_SCOPE_SUFFIX]


class ClientSecretTokenAcquirer:
    """Token acquirer using ``azure.identity.ClientSecretCredential``.

    A credential is built per call from the plain secret and closed
    afterwards, so nothing here outlives the exchange.
    """

    def __init__(self, tenant_id: str, authority: Optional[str] = None) -> None:
        self.tenant_id = tenant_id
        self.authority = authority

    def acquire_token_for_client(
        self,
        client_id: str,
        audience: str,
        client_secret: str,
        scopes: Sequence[str],
    ) -> AccessToken:
        kwargs = {"authority": self.authority} if self.authority else {}
        requested = effective_scopes(audience, scopes)
        logger.debug("Requesting token for client %s, scopes=%s", client_id, requested)
        rejected: Optional[AuthenticationRejectedError] = None
        credential: Optional[ClientSecretCredential] = None
        try:
            credential = ClientSecretCredential(self.tenant_id, client_id, client_secret, **kwargs)
            return credential.get_token(*requested)
        except ClientAuthenticationError as e:
            message = redact(e.message or str(e), client_secret)
            match = _AADSTS_CODE.search(message)
            rejected = AuthenticationRejectedError(message, match.group(0) if match else None)
        finally:
            if credential is not None:
                credential.close()
            del credential, client_secret
        # Outside the handler, so the unredacted provider error is not kept as __context__.
        raise rejected
