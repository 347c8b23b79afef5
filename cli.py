"""Simple CLI: push one request through the proxy pipeline.

Usage examples:
- List models:
  python cli.py GET /v1beta/models

- Generate (JSON string body):
  python cli.py POST /v1beta/models/gemini-pro:generateContent --body "{\"contents\":[{\"parts\":[{\"text\":\"hi\"}]}]}"

- Body from a file (prefix with @), pretty output:
  python cli.py POST /v1beta/models/gemini-2.5-flash:generateContent --body @request.json --pretty

Notes:
- Reads GEMINI_API_KEY etc. from the environment exactly like the Lambda entrypoint.
- The exit code is 0 for 2xx results, 1 otherwise.
"""
import argparse
import dataclasses
import json
import sys
from pathlib import Path
from typing import Optional

from src.gemini_proxy.config import ProxyConfig
from src.gemini_proxy.logging_util import get_logger
from src.gemini_proxy.proxy import GeminiProxy
from src.gemini_proxy.types import InboundRequest

logger = get_logger(__name__)

def _load_body(value: Optional[str]) -> Optional[bytes]:
    if not value:
        return None
    if value.startswith("@"):
        return Path(value[1:]).read_bytes()
    return value.encode("utf-8")

def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Send one request through the Gemini proxy pipeline.")
    ap.add_argument("method", help="HTTP method, e.g. GET or POST")
    ap.add_argument("path", help="Gemini REST path, with or without the API version prefix")
    ap.add_argument("--query", default="", help="Raw query string (a client 'key' is always dropped)")
    ap.add_argument("--body", default=None, help="JSON string or @path/to/json")
    ap.add_argument("--timeout", type=float, default=None, help="Override the upstream deadline in seconds")
    ap.add_argument("--pretty", action="store_true", help="Pretty print a JSON response body")
    return ap

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        body = _load_body(args.body)
    except OSError as e:
        logger.error("Failed to read body: %s", e)
        return 2

    config = ProxyConfig.from_env()
    if args.timeout is not None:
        config = dataclasses.replace(config, timeout_s=args.timeout)

    proxy = GeminiProxy(config)
    result = proxy.handle(InboundRequest(method=args.method, path=args.path, raw_query=args.query, body=body))

    print(f"HTTP {result.status_code}")
    for k, v in result.headers.items():
        print(f"{k}: {v}")
    print()

    text = result.body_text()
    if args.pretty:
        try:
            text = json.dumps(json.loads(text), ensure_ascii=False, indent=2)
        except ValueError:
            pass
    print(text)

    return 0 if 200 <= result.status_code < 300 else 1

if __name__ == "__main__":
    raise SystemExit(main())
