"""Base class for management-plane resource adapters."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from ..services.resilience import error_tracker

logger = logging.getLogger(__name__)

ClientT = TypeVar("ClientT")

ClientFactory = Callable[[str], Any]


class ResourceAdapter(ABC, Generic[ClientT]):
    """Wraps a remote management client for one resource type.

    Every operation asks the factory for a fresh, request-scoped client
    tagged with a new correlation id. Remote failures are recorded in the
    error tracker and re-raised unchanged; nothing is retried here.
    """

    def __init__(self, client_factory: Callable[[str], ClientT]) -> None:
        self._client_factory = client_factory

    @property
    @abstractmethod
    def provider_type(self) -> str:
        """Return the provider type identifier (e.g. 'azure')."""
        ...

    @property
    @abstractmethod
    def resource_type(self) -> str:
        """Return the managed resource type (e.g. 'sql_server')."""
        ...

    def _new_client(self) -> tuple[str, ClientT]:
        correlation_id = str(uuid.uuid4())
        return correlation_id, self._client_factory(correlation_id)

    def _remote_call(self, operation: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Run one management call, tracking (not handling) its failure."""
        correlation_id, client = self._new_client()
        logger.debug(
            "%s.%s %s (correlation id %s)",
            self.provider_type, self.resource_type, operation, correlation_id,
        )
        try:
            return func(client, *args, **kwargs)
        except Exception as e:
            error_tracker.record(
                source=f"provider.{self.provider_type}",
                error=e,
                operation=operation,
                resource_type=self.resource_type,
                correlation_id=correlation_id,
            )
            raise
