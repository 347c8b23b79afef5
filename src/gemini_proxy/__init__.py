"""Gemini REST proxy: credential injection, model alias rewriting, safe generation extraction."""
from .config import ProxyConfig, __version__
from .proxy import GeminiProxy

__all__ = ["GeminiProxy", "ProxyConfig", "__version__"]
