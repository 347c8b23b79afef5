"""Shared types and lightweight data containers.

Every invocation builds its own RequestContext / UpstreamRequest;
nothing here is shared between calls.
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

@dataclass
class InboundRequest:
    method: str
    path: str
    raw_query: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None

@dataclass(frozen=True)
class UpstreamRequest:
    url: str
    method: str
    path: str
    headers: Dict[str, str]
    body: Optional[bytes] = None

@dataclass
class UpstreamResponse:
    status_code: int
    headers: Dict[str, str]
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def content_type(self) -> Optional[str]:
        for k, v in self.headers.items():
            if k.lower() == "content-type":
                return v
        return None

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

@dataclass
class OutboundResult:
    status_code: int
    headers: Dict[str, str]
    # bytes / str pass through as-is, anything else is JSON-encoded
    body: Any = b""

    def body_text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8", errors="replace")
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body, ensure_ascii=False)

@dataclass
class RequestContext:
    request_id: str
    start_time: float = field(default_factory=time.monotonic)

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.start_time) * 1000)

@dataclass
class GenerationSuccess:
    text: str
    response: Dict[str, Any]
    usage_metadata: Optional[Dict[str, Any]] = None

@dataclass
class GenerationRefusal:
    # no_candidates | no_parts | no_text | invalid_json
    reason: str
    message: str
    response: Any = None

@dataclass
class GenerationError:
    message: str
    response: Any = None

GenerationResult = Union[GenerationSuccess, GenerationRefusal, GenerationError]
