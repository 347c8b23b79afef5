"""Inbound -> upstream request derivation.

Rules:
- Path: strip the function mount prefix, force the API version segment.
- Query: client params survive, a client-supplied key never does; the server key goes last.
- Body: read-only methods send nothing; anything else must be JSON and is re-serialized.
- Headers are built fresh; client headers (Authorization, cookies, ...) are not forwarded.
"""
from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Optional
from urllib.parse import unquote_plus, urlencode

from .aliases import ModelAliasRewriter
from .config import ProxyConfig
from .errors import ValidationError
from .types import InboundRequest, RequestContext, UpstreamRequest

READ_ONLY_METHODS = ("GET", "HEAD")

def map_path(path: str, mount_prefix: str, api_version: str, default_path: str = "/models") -> str:
    p = path or ""
    if mount_prefix and (p == mount_prefix or p.startswith(mount_prefix + "/")):
        p = p[len(mount_prefix):]

    version = "/" + api_version.strip("/")
    if p == version or p.startswith(version + "/"):
        return p

    if not p or p == "/":
        p = default_path
    if not p.startswith("/"):
        p = "/" + p
    return version + p

def build_query(raw_query: str, api_key: str, credential_param: str = "key") -> str:
    # kept pairs go out byte-for-byte; only the name is decoded for the comparison
    kept = []
    for pair in (raw_query or "").lstrip("?").split("&"):
        if not pair:
            continue
        name = unquote_plus(pair.split("=", 1)[0])
        if name == credential_param:
            continue
        kept.append(pair)
    kept.append(credential_pair(api_key, credential_param))
    return "&".join(kept)

def credential_pair(api_key: str, credential_param: str = "key") -> str:
    return urlencode({credential_param: api_key})

def operation_name(path: str) -> Optional[str]:
    last = path.rstrip("/").rsplit("/", 1)[-1]
    _, sep, op = last.partition(":")
    return op if sep else None

def is_generation_call(path: str, ops: Iterable[str]) -> bool:
    return operation_name(path) in set(ops)

def _merge_generation_config(payload: Dict[str, Any], defaults: Dict[str, Any], override: bool) -> Dict[str, Any]:
    current = payload.get("generationConfig")
    if not isinstance(current, dict):
        current = {}
    if override:
        merged = {**current, **defaults}
    else:
        merged = {**defaults, **current}
    out = dict(payload)
    out["generationConfig"] = merged
    return out

def build_body(
    method: str,
    body: Optional[bytes],
    generation: bool = False,
    generation_defaults: Optional[Dict[str, Any]] = None,
    override_generation_config: bool = False,
) -> Optional[bytes]:
    if method.upper() in READ_ONLY_METHODS or not body:
        return None

    try:
        payload = json.loads(body.decode("utf-8") if isinstance(body, bytes) else body)
    except (UnicodeDecodeError, ValueError) as e:
        raise ValidationError(f"Request body is not valid JSON: {e}")

    if generation and generation_defaults and isinstance(payload, dict):
        payload = _merge_generation_config(payload, generation_defaults, override_generation_config)

    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

def build_upstream_request(
    inbound: InboundRequest,
    config: ProxyConfig,
    ctx: RequestContext,
    rewriter: ModelAliasRewriter,
) -> UpstreamRequest:
    method = (inbound.method or "GET").upper()

    path = map_path(inbound.path, config.mount_prefix, config.api_version, config.default_path)
    path = rewriter.rewrite(path)
    generation = is_generation_call(path, config.generation_ops)

    body = build_body(
        method,
        inbound.body,
        generation=generation,
        generation_defaults=config.generation_defaults,
        override_generation_config=config.override_generation_config,
    )

    query = build_query(inbound.raw_query, config.api_key, config.credential_param)
    url = f"{config.upstream_base.rstrip('/')}{path}?{query}"

    headers = {
        "Content-Type": "application/json",
        "User-Agent": config.user_agent,
        "X-Request-ID": ctx.request_id,
    }

    return UpstreamRequest(url=url, method=method, path=path, headers=headers, body=body)
