"""Logging utilities.

Key goal:
- Each pipeline step logs with the request id so one invocation can be followed in the host's log stream.
- The API key must never reach a log line; route URLs through redact() first.
"""
from __future__ import annotations

import logging
import os
from urllib.parse import quote, quote_plus

_DEFAULT_LEVEL = os.environ.get("GEMINI_PROXY_LOG_LEVEL", "INFO").upper()

def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)

    # If already configured elsewhere, do not attach handlers again.
    if logger.handlers:
        return logger

    logger.setLevel(_DEFAULT_LEVEL)

    h = logging.StreamHandler()
    fmt = logging.Formatter("[%(levelname)s] %(name)s:%(lineno)d - %(message)s")
    h.setFormatter(fmt)
    logger.addHandler(h)

    return logger

def log_step(logger: logging.Logger, request_id: str, step: str, msg: str):
    logger.info("[%s] [STEP %s] %s", request_id, step, msg)

def redact(text: str, secret: str) -> str:
    if not secret:
        return text
    # URLs carry the key query-encoded, so mask every spelling of it
    for form in sorted({quote_plus(secret), quote(secret, safe=""), secret}, key=len, reverse=True):
        text = text.replace(form, "***")
    return text
