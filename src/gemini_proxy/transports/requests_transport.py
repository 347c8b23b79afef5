"""requests-backed transport (buffered, no streaming to the client).

The body is read in chunks so the total deadline holds even against an upstream
that trickles bytes slower than the per-read timeout.
"""
from __future__ import annotations

import time
from typing import Optional

import requests

from ..errors import TransportError, UpstreamTimeout
from ..types import UpstreamRequest, UpstreamResponse
from .base import BaseTransport

CONNECT_TIMEOUT_S = 10.0
CHUNK_SIZE = 16 * 1024

class RequestsTransport(BaseTransport):
    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session
        self._response: Optional[requests.Response] = None

    def scoped(self) -> "RequestsTransport":
        return RequestsTransport(session=requests.Session())

    def close(self) -> None:
        r = self._response
        if r is not None:
            r.close()
        if self.session is not None:
            self.session.close()

    def send(self, request: UpstreamRequest, timeout: float) -> UpstreamResponse:
        deadline = time.monotonic() + timeout
        sender = self.session or requests
        try:
            r = sender.request(
                request.method,
                request.url,
                headers=request.headers,
                data=request.body,
                timeout=(min(CONNECT_TIMEOUT_S, timeout), timeout),
                stream=True,
            )
        except requests.Timeout as e:
            raise UpstreamTimeout(f"upstream timed out after {timeout}s: {type(e).__name__}")
        except requests.RequestException as e:
            # str(e) can echo the URL, and the URL carries the key
            raise TransportError(f"request failed: {type(e).__name__}")

        self._response = r
        try:
            chunks = []
            for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                chunks.append(chunk)
                if time.monotonic() > deadline:
                    raise UpstreamTimeout(f"upstream body not complete within {timeout}s")
            body = b"".join(chunks)
        except requests.Timeout as e:
            raise UpstreamTimeout(f"upstream timed out after {timeout}s: {type(e).__name__}")
        except requests.RequestException as e:
            raise TransportError(f"reading response failed: {type(e).__name__}")
        finally:
            r.close()

        return UpstreamResponse(
            status_code=r.status_code,
            headers=dict(r.headers),
            body=body,
        )
