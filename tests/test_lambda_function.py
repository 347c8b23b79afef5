import json
from types import SimpleNamespace

import lambda_function
from src.gemini_proxy.config import ProxyConfig
from src.gemini_proxy.proxy import GeminiProxy

from conftest import API_KEY, RecordingTransport, generation_body

def _install(monkeypatch, transport, **cfg):
    monkeypatch.setattr(lambda_function, "_proxy", GeminiProxy(ProxyConfig(api_key=API_KEY, **cfg), transport=transport))

def test_handler_uses_aws_request_id(monkeypatch):
    t = RecordingTransport(body=generation_body("hi there"))
    _install(monkeypatch, t)
    event = {
        "httpMethod": "POST",
        "path": "/.netlify/functions/gemini-proxy/models/gemini-2.0-pro:generateContent",
        "body": json.dumps({"contents": [{"parts": [{"text": "hi"}]}]}),
    }
    out = lambda_function.lambda_handler(event, SimpleNamespace(aws_request_id="aws-123"))
    assert out["statusCode"] == 200
    assert out["headers"]["X-Request-ID"] == "aws-123"
    body = json.loads(out["body"])
    assert body["text"] == "hi there"
    assert body["requestId"] == "aws-123"
    assert t.calls[0].path == "/v1beta/models/gemini-2.5-flash:generateContent"

def test_handler_preflight(monkeypatch):
    t = RecordingTransport()
    _install(monkeypatch, t)
    out = lambda_function.lambda_handler({"httpMethod": "OPTIONS", "path": "/x"}, None)
    assert out["statusCode"] == 200
    assert out["body"] == ""
    assert out["headers"]["Access-Control-Max-Age"] == "86400"
    assert t.calls == []

def test_handler_bad_base64_is_400(monkeypatch):
    t = RecordingTransport()
    _install(monkeypatch, t)
    out = lambda_function.lambda_handler(
        {"httpMethod": "POST", "path": "/x", "isBase64Encoded": True, "body": "***"},
        SimpleNamespace(aws_request_id="aws-b64"),
    )
    assert out["statusCode"] == 400
    assert json.loads(out["body"])["requestId"] == "aws-b64"
    assert t.calls == []

def test_handler_never_raises(monkeypatch):
    class Exploding:
        def handle(self, inbound, request_id=None):
            raise RuntimeError("boom")

    monkeypatch.setattr(lambda_function, "_proxy", Exploding())
    out = lambda_function.lambda_handler({"httpMethod": "GET", "path": "/"}, SimpleNamespace(aws_request_id="aws-x"))
    assert out["statusCode"] == 500
    assert out["headers"]["X-Request-ID"] == "aws-x"
    assert json.loads(out["body"])["requestId"] == "aws-x"
