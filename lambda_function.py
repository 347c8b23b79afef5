"""AWS Lambda entrypoint.

Design goals:
- Keep this file small and stable.
- Delegate all real logic to src/gemini_proxy so that:
  - The same pipeline can be used from the CLI and from Lambda.
  - Configuration is read once per cold start, never per request.

Mount the function under GEMINI_PROXY_MOUNT_PREFIX and call any Gemini REST path below it, e.g.
   POST /.netlify/functions/gemini-proxy/v1beta/models/gemini-2.5-flash:generateContent

Return:
- statusCode: upstream status, or 400/500/502/504 for proxy-side failures
- headers: CORS + X-Request-ID (+ X-Response-Time once upstream answered)
- body: JSON string
"""
import json
import uuid
from typing import Any, Dict

from src.gemini_proxy.config import ProxyConfig
from src.gemini_proxy.errors import ProxyError
from src.gemini_proxy.events import inbound_from_event, result_to_event
from src.gemini_proxy.logging_util import get_logger
from src.gemini_proxy.proxy import GeminiProxy
from src.gemini_proxy.response_builder import ResponseBuilder
from src.gemini_proxy.types import RequestContext

logger = get_logger(__name__)

_proxy = GeminiProxy(ProxyConfig.from_env())

def lambda_handler(event: Dict[str, Any], context: Any):
    request_id = getattr(context, "aws_request_id", None) or uuid.uuid4().hex
    try:
        inbound = inbound_from_event(event if isinstance(event, dict) else {})
    except ProxyError as e:
        logger.error("[%s] bad event: %s", request_id, e)
        return result_to_event(ResponseBuilder().from_error(e, RequestContext(request_id)))

    try:
        result = _proxy.handle(inbound, request_id=request_id)
        return result_to_event(result)
    except Exception as e:
        logger.exception("[%s] lambda_handler fatal error: %s", request_id, type(e).__name__)
        return {
            "statusCode": 500,
            "headers": ResponseBuilder.headers(RequestContext(request_id)),
            "body": json.dumps({"error": "Internal proxy error", "kind": "internal_error", "requestId": request_id}),
        }
