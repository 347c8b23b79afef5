"""Host event <-> pipeline conversion.

Accepted event shapes (minimal):
1) Netlify / API Gateway REST (v1):
   {"httpMethod": "POST", "path": "/...", "rawQuery": "a=1",
    "queryStringParameters": {...}, "headers": {...}, "body": "...", "isBase64Encoded": false}

2) API Gateway HTTP API (v2) / Lambda Function URL:
   {"requestContext": {"http": {"method": "POST"}}, "rawPath": "/...", "rawQueryString": "a=1", ...}

Return shape for the host: {"statusCode": int, "headers": {...}, "body": str}
"""
from __future__ import annotations

import base64
import binascii
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlencode

from .errors import ValidationError
from .types import InboundRequest, OutboundResult

def _method(event: Dict[str, Any]) -> str:
    m = event.get("httpMethod")
    if not m:
        http = (event.get("requestContext") or {}).get("http") or {}
        m = http.get("method")
    return str(m or "GET").upper()

def _path(event: Dict[str, Any]) -> str:
    return str(event.get("rawPath") or event.get("path") or "/")

def _raw_query(event: Dict[str, Any]) -> str:
    for key in ("rawQueryString", "rawQuery"):
        if event.get(key):
            return str(event[key])

    pairs: List[Tuple[str, str]] = []
    multi = event.get("multiValueQueryStringParameters")
    if isinstance(multi, dict) and multi:
        for k, values in multi.items():
            for v in values or []:
                pairs.append((k, "" if v is None else str(v)))
        return urlencode(pairs)

    single = event.get("queryStringParameters")
    if isinstance(single, dict) and single:
        pairs = [(k, "" if v is None else str(v)) for k, v in single.items()]
        return urlencode(pairs)
    return ""

def _body(event: Dict[str, Any]) -> Optional[bytes]:
    raw = event.get("body")
    if raw is None or raw == "":
        return None
    if isinstance(raw, bytes):
        return raw
    if event.get("isBase64Encoded"):
        try:
            return base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError):
            raise ValidationError("Request body is not valid base64")
    return str(raw).encode("utf-8")

def inbound_from_event(event: Dict[str, Any]) -> InboundRequest:
    headers = event.get("headers") or {}
    method = _method(event)
    return InboundRequest(
        method=method,
        path=_path(event),
        raw_query=_raw_query(event),
        headers={str(k): str(v) for k, v in headers.items()},
        # preflight never looks at the body
        body=None if method == "OPTIONS" else _body(event),
    )

def result_to_event(result: OutboundResult) -> Dict[str, Any]:
    return {
        "statusCode": result.status_code,
        "headers": dict(result.headers),
        "body": result.body_text(),
    }
