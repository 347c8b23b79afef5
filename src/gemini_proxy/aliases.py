"""Model alias rewriting.

Upstream retires model ids faster than clients are updated, so legacy ids are
mapped onto one canonical id here.

Matching is by exact model token, never by substring:
- A path segment is split at the first ':' into model token and operation.
- Only the model token is compared against the alias set.
- "gemini-pro-vision" or "v2.0" are left alone.
"""
from __future__ import annotations

from typing import Dict, Iterable

class ModelAliasRewriter:
    def __init__(self, aliases: Iterable[str], canonical: str):
        self.canonical = canonical
        self._mapping: Dict[str, str] = {a: canonical for a in aliases if a}

    def rewrite_segment(self, segment: str) -> str:
        model, sep, op = segment.partition(":")
        target = self._mapping.get(model)
        if target is None:
            return segment
        return f"{target}{sep}{op}"

    def rewrite(self, path: str) -> str:
        return "/".join(self.rewrite_segment(s) for s in path.split("/"))
