import json
import threading

import pytest

from src.gemini_proxy.config import ProxyConfig
from src.gemini_proxy.proxy import GeminiProxy
from src.gemini_proxy.transports.base import BaseTransport
from src.gemini_proxy.types import UpstreamResponse

API_KEY = "server-secret-key"

class RecordingTransport(BaseTransport):
    def __init__(self, status=200, body=None, headers=None, exc=None):
        self.status = status
        self.body = body if body is not None else {"models": []}
        self.headers = headers or {"Content-Type": "application/json; charset=UTF-8"}
        self.exc = exc
        self.calls = []

    def send(self, request, timeout):
        self.calls.append(request)
        if self.exc is not None:
            raise self.exc
        raw = self.body if isinstance(self.body, bytes) else json.dumps(self.body).encode("utf-8")
        return UpstreamResponse(status_code=self.status, headers=dict(self.headers), body=raw)

class BlockingTransport(BaseTransport):
    def __init__(self):
        self.release = threading.Event()
        self.calls = []
        self.closed = False

    def send(self, request, timeout):
        self.calls.append(request)
        self.release.wait(5)
        return UpstreamResponse(status_code=200, headers={}, body=b"{}")

    def close(self):
        self.closed = True
        self.release.set()

@pytest.fixture
def config():
    return ProxyConfig(api_key=API_KEY)

@pytest.fixture
def transport():
    return RecordingTransport()

@pytest.fixture
def blocking_transport():
    t = BlockingTransport()
    yield t
    t.release.set()

@pytest.fixture
def make_proxy(config):
    def _make(transport, **overrides):
        cfg = config
        if overrides:
            cfg = ProxyConfig(**{**config.__dict__, **overrides})
        return GeminiProxy(cfg, transport=transport)
    return _make

def generation_body(text="hello"):
    return {
        "candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 3, "candidatesTokenCount": 1, "totalTokenCount": 4},
    }
