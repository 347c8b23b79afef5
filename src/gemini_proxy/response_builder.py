"""Outbound response shaping.

Every result carries the CORS headers, a Content-Type and X-Request-ID.
X-Response-Time is added once the upstream call has produced a response.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from .errors import ProxyError
from .extraction import decode_generation_body
from .request_builder import is_generation_call
from .types import (
    GenerationError,
    GenerationRefusal,
    GenerationSuccess,
    OutboundResult,
    RequestContext,
    UpstreamRequest,
    UpstreamResponse,
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Request-ID",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Max-Age": "86400",
}

JSON_CONTENT_TYPE = "application/json"

class ResponseBuilder:
    def __init__(self, generation_ops=("generateContent",), error_body_limit: int = 500):
        self.generation_ops = tuple(generation_ops)
        self.error_body_limit = error_body_limit

    @staticmethod
    def headers(ctx: Optional[RequestContext], content_type: str = JSON_CONTENT_TYPE, timed: bool = False) -> Dict[str, str]:
        h = dict(CORS_HEADERS)
        h["Content-Type"] = content_type
        if ctx is not None:
            h["X-Request-ID"] = ctx.request_id
            if timed:
                h["X-Response-Time"] = f"{ctx.elapsed_ms()}ms"
        return h

    def preflight(self, ctx: Optional[RequestContext] = None) -> OutboundResult:
        h = dict(CORS_HEADERS)
        if ctx is not None:
            h["X-Request-ID"] = ctx.request_id
        return OutboundResult(status_code=200, headers=h, body=b"")

    def from_error(self, exc: BaseException, ctx: RequestContext) -> OutboundResult:
        if isinstance(exc, ProxyError):
            status, kind, message = exc.status_code, exc.kind, str(exc) or exc.kind
        else:
            status, kind, message = 500, "internal_error", "Internal proxy error"
        payload = {"error": message, "kind": kind, "requestId": ctx.request_id}
        return OutboundResult(status_code=status, headers=self.headers(ctx), body=payload)

    def from_upstream(self, resp: UpstreamResponse, upstream: UpstreamRequest, ctx: RequestContext) -> OutboundResult:
        if not resp.ok:
            payload = {
                "error": "Upstream API error",
                "status": resp.status_code,
                "details": resp.text()[: self.error_body_limit],
                "requestId": ctx.request_id,
            }
            return OutboundResult(status_code=resp.status_code, headers=self.headers(ctx, timed=True), body=payload)

        if not is_generation_call(upstream.path, self.generation_ops):
            content_type = resp.content_type or JSON_CONTENT_TYPE
            return OutboundResult(
                status_code=resp.status_code,
                headers=self.headers(ctx, content_type=content_type, timed=True),
                body=resp.body,
            )

        result = decode_generation_body(resp.body)
        return OutboundResult(status_code=resp.status_code, headers=self.headers(ctx, timed=True), body=self.render_generation(result, ctx))

    @staticmethod
    def render_generation(result: Any, ctx: RequestContext) -> Dict[str, Any]:
        if isinstance(result, GenerationSuccess):
            return {
                "success": True,
                "text": result.text,
                "response": result.response,
                "usageMetadata": result.usage_metadata,
                "requestId": ctx.request_id,
            }
        if isinstance(result, GenerationError):
            return {
                "success": False,
                "reason": "upstream_error",
                "error": result.message,
                "response": result.response,
                "requestId": ctx.request_id,
            }
        if isinstance(result, GenerationRefusal):
            return {
                "success": False,
                "reason": result.reason,
                "error": result.message,
                "response": result.response,
                "requestId": ctx.request_id,
            }
        raise TypeError(f"unexpected generation result: {type(result).__name__}")
