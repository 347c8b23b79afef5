"""Single deadline-bound upstream call.

The transport runs on a daemon worker thread and the caller waits on a future
bounded by the configured deadline. On expiry the per-call transport is closed,
which tears down the in-flight connection; the daemon flag keeps an abandoned
call from holding the process open. There is no retry.
"""
from __future__ import annotations

import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeout

from .errors import ProxyError, TransportError, UpstreamTimeout
from .logging_util import get_logger
from .transports.base import BaseTransport
from .types import UpstreamRequest, UpstreamResponse

logger = get_logger(__name__)

WORKER_NAME = "gemini-proxy-upstream"

def _run(future: Future, call: BaseTransport, request: UpstreamRequest, timeout: float):
    if not future.set_running_or_notify_cancel():
        return
    try:
        future.set_result(call.send(request, timeout))
    except BaseException as e:
        future.set_exception(e)

class Forwarder:
    def __init__(self, transport: BaseTransport, timeout_s: float = 30.0):
        self.transport = transport
        self.timeout_s = timeout_s

    def forward(self, request: UpstreamRequest) -> UpstreamResponse:
        call = self.transport.scoped()
        future: Future = Future()
        worker = threading.Thread(
            target=_run,
            args=(future, call, request, self.timeout_s),
            name=WORKER_NAME,
            daemon=True,
        )
        try:
            worker.start()
            try:
                return future.result(timeout=self.timeout_s)
            except FutureTimeout:
                raise UpstreamTimeout(f"upstream did not respond within {self.timeout_s}s")
            except ProxyError:
                raise
            except Exception as e:
                raise TransportError(f"transport failed: {type(e).__name__}") from e
        finally:
            try:
                call.close()
            except Exception as e:
                logger.warning("closing upstream call failed: %s", type(e).__name__)
