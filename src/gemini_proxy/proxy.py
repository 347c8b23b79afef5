"""GeminiProxy: the per-request pipeline orchestrator."""
from __future__ import annotations

import uuid
from typing import Optional

from .aliases import ModelAliasRewriter
from .config import ProxyConfig
from .errors import ProxyError
from .forwarder import Forwarder
from .logging_util import get_logger, log_step, redact
from .request_builder import build_upstream_request
from .response_builder import ResponseBuilder
from .transports.base import BaseTransport
from .transports.requests_transport import RequestsTransport
from .types import InboundRequest, OutboundResult, RequestContext

logger = get_logger(__name__)

def new_request_id() -> str:
    return uuid.uuid4().hex

class GeminiProxy:
    def __init__(
        self,
        config: ProxyConfig,
        transport: Optional[BaseTransport] = None,
        rewriter: Optional[ModelAliasRewriter] = None,
    ):
        self.config = config
        self.rewriter = rewriter or ModelAliasRewriter(config.model_aliases, config.canonical_model)
        self.forwarder = Forwarder(transport or RequestsTransport(), timeout_s=config.timeout_s)
        self.responses = ResponseBuilder(config.generation_ops, config.error_body_limit)

    def handle(self, inbound: InboundRequest, request_id: Optional[str] = None) -> OutboundResult:
        ctx = RequestContext(request_id=request_id or new_request_id())
        method = (inbound.method or "").upper()
        logger.info("[%s] <- %s %s", ctx.request_id, method, inbound.path)

        try:
            if method == "OPTIONS":
                log_step(logger, ctx.request_id, "1", "preflight")
                return self.responses.preflight(ctx)

            log_step(logger, ctx.request_id, "2", "config check")
            self.config.require_api_key()

            log_step(logger, ctx.request_id, "3", "build upstream request")
            upstream = build_upstream_request(inbound, self.config, ctx, self.rewriter)
            logger.info("[%s] -> %s %s", ctx.request_id, upstream.method, redact(upstream.url, self.config.api_key))

            log_step(logger, ctx.request_id, "4", "forward")
            resp = self.forwarder.forward(upstream)

            log_step(logger, ctx.request_id, "5", f"normalize upstream status={resp.status_code}")
            result = self.responses.from_upstream(resp, upstream, ctx)
            if not resp.ok:
                logger.warning(
                    "[%s] upstream error status=%s elapsed_ms=%s",
                    ctx.request_id, resp.status_code, ctx.elapsed_ms(),
                )
            else:
                logger.info("[%s] done status=%s elapsed_ms=%s", ctx.request_id, result.status_code, ctx.elapsed_ms())
            return result

        except ProxyError as e:
            logger.error(
                "[%s] %s: %s elapsed_ms=%s",
                ctx.request_id, e.kind, redact(str(e), self.config.api_key), ctx.elapsed_ms(),
            )
            return self.responses.from_error(e, ctx)
        except Exception as e:
            logger.exception(
                "[%s] internal_error: %s elapsed_ms=%s",
                ctx.request_id, redact(str(e), self.config.api_key), ctx.elapsed_ms(),
            )
            return self.responses.from_error(e, ctx)
