"""Protected-string helpers built on ``pydantic.SecretStr``."""

from __future__ import annotations

from typing import Optional

from pydantic import SecretStr


def protect(value: str | SecretStr) -> SecretStr:
    """Wrap a plain value in a ``SecretStr`` (no-op if it already is one)."""
    if isinstance(value, SecretStr):
        return value
    return SecretStr(value)


def decrypt(secret: Optional[SecretStr]) -> Optional[str]:
    """Return the plain value of *secret*, or ``None``.

    Only call this at the boundary where a remote API needs the value,
    and do not keep the result around.
    """
    if secret is None:
        return None
    return secret.get_secret_value()
