"""Safe decode of generateContent responses.

The upstream body is not guaranteed to be populated at every level: prompts get
blocked, candidates get filtered, generation stops early. Instead of indexing
candidates[0].content.parts[0].text and hoping, decode_generation walks the
shape once and returns exactly one of:

- GenerationError    top-level "error" present
- GenerationRefusal  no_candidates / no_parts / no_text / invalid_json
- GenerationSuccess  text + full response + usageMetadata
"""
from __future__ import annotations

import json
from typing import Any, Dict, Optional

from .types import GenerationError, GenerationRefusal, GenerationResult, GenerationSuccess

def _error_message(err: Any) -> str:
    if isinstance(err, dict):
        msg = err.get("message")
        if msg:
            return str(msg)
        status = err.get("status")
        if status:
            return str(status)
        return json.dumps(err, ensure_ascii=False) if err else "upstream returned an error"
    return str(err) or "upstream returned an error"

def _block_reason(data: Dict[str, Any]) -> Optional[str]:
    feedback = data.get("promptFeedback")
    if isinstance(feedback, dict) and feedback.get("blockReason"):
        return str(feedback["blockReason"])
    return None

def decode_generation(data: Any) -> GenerationResult:
    if not isinstance(data, dict):
        return GenerationRefusal("invalid_json", "response is not a JSON object", data)

    if "error" in data and data["error"] is not None:
        return GenerationError(_error_message(data["error"]), data)

    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        block = _block_reason(data)
        msg = f"no candidates returned (blockReason={block})" if block else "no candidates returned"
        return GenerationRefusal("no_candidates", msg, data)

    first = candidates[0] if isinstance(candidates[0], dict) else {}
    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts:
        finish = first.get("finishReason")
        msg = f"candidate has no content parts (finishReason={finish})" if finish else "candidate has no content parts"
        return GenerationRefusal("no_parts", msg, data)

    part = parts[0] if isinstance(parts[0], dict) else {}
    text = part.get("text")
    # "" is a valid (empty) generation; only a missing or null field is a refusal
    if text is None:
        return GenerationRefusal("no_text", "first part has no text", data)

    return GenerationSuccess(text=str(text), response=data, usage_metadata=data.get("usageMetadata"))

def decode_generation_body(body: bytes) -> GenerationResult:
    try:
        data = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        return GenerationRefusal("invalid_json", f"upstream body is not valid JSON: {e}", None)
    return decode_generation(data)
