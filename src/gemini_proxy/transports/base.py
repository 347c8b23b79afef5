"""Transport interface for the single upstream call."""
from __future__ import annotations

from ..types import UpstreamRequest, UpstreamResponse

class BaseTransport:
    def scoped(self) -> "BaseTransport":
        """Return a transport that owns the resources of exactly one call."""
        return self

    def send(self, request: UpstreamRequest, timeout: float) -> UpstreamResponse:
        raise NotImplementedError

    def close(self) -> None:
        """Tear down the call; may be invoked from another thread while send() is running."""
