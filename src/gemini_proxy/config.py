"""Process-wide proxy configuration.

ProxyConfig is built once at cold start (ProxyConfig.from_env) and handed to
GeminiProxy. Nothing below the orchestrator reads the environment.

model_aliases.yaml supports:
- canonical_model: gemini-2.5-flash
- aliases:
    - gemini-pro
    - gemini-2.0-pro
    - gemini-2.5-flash-latest
- generation_defaults:
    temperature: 0.7
- override_generation_config: false
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .errors import ConfigError
from .logging_util import get_logger

logger = get_logger(__name__)

__version__ = "2.5.0"

DEFAULT_UPSTREAM_BASE = "https://generativelanguage.googleapis.com"
DEFAULT_MOUNT_PREFIX = "/.netlify/functions/gemini-proxy"
DEFAULT_CANONICAL_MODEL = "gemini-2.5-flash"
DEFAULT_MODEL_ALIASES = ("gemini-pro", "gemini-2.0-pro", "gemini-2.5-flash-latest")

def _sanitize_api_key(raw: str) -> str:
    k = (raw or "").strip()
    k = k.strip(' "\'`')
    k = k.strip("“”‘’")
    return k

def _to_bool(v: Any, default: bool = False) -> bool:
    if v is None:
        return default
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in ("1", "true", "y", "yes"):
        return True
    if s in ("0", "false", "n", "no"):
        return False
    return default

def _to_float(v: Any, default: float) -> float:
    if v is None or v == "":
        return default
    try:
        return float(v)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric timeout %r, using %s", v, default)
        return default

def _load_yaml(path: Path) -> Dict:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to load YAML: %s (%s)", path, e)
        return {}
    if not isinstance(data, dict):
        logger.error("Ignoring YAML that is not a mapping: %s", path)
        return {}
    return data

def default_aliases_path() -> Path:
    # <root>/src/gemini_proxy/config.py -> parents[1] == <root>/src
    return Path(__file__).resolve().parents[1] / "configs" / "model_aliases.yaml"

@dataclass
class ProxyConfig:
    api_key: str = ""
    upstream_base: str = DEFAULT_UPSTREAM_BASE
    api_version: str = "v1beta"
    default_path: str = "/models"
    mount_prefix: str = DEFAULT_MOUNT_PREFIX
    timeout_s: float = 30.0
    canonical_model: str = DEFAULT_CANONICAL_MODEL
    model_aliases: Tuple[str, ...] = DEFAULT_MODEL_ALIASES
    generation_ops: Tuple[str, ...] = ("generateContent",)
    error_body_limit: int = 500
    credential_param: str = "key"
    user_agent: str = f"gemini-proxy/{__version__}"
    generation_defaults: Dict[str, Any] = field(default_factory=dict)
    override_generation_config: bool = False

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ConfigError("GEMINI_API_KEY is not configured")
        return self.api_key

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, aliases_path: Optional[Path] = None) -> "ProxyConfig":
        env = os.environ if environ is None else environ
        file_cfg = _load_yaml(aliases_path or default_aliases_path())

        aliases = file_cfg.get("aliases")
        if isinstance(aliases, list) and aliases:
            model_aliases = tuple(str(a).strip() for a in aliases if str(a).strip())
        else:
            model_aliases = DEFAULT_MODEL_ALIASES

        gen_defaults = file_cfg.get("generation_defaults") or {}
        if not isinstance(gen_defaults, dict):
            logger.error("generation_defaults must be a mapping, ignoring")
            gen_defaults = {}

        canonical = (
            (env.get("GEMINI_CANONICAL_MODEL") or "").strip()
            or str(file_cfg.get("canonical_model") or "").strip()
            or DEFAULT_CANONICAL_MODEL
        )

        override = _to_bool(
            env.get("GEMINI_OVERRIDE_GENERATION_CONFIG"),
            _to_bool(file_cfg.get("override_generation_config"), False),
        )

        return cls(
            api_key=_sanitize_api_key(env.get("GEMINI_API_KEY") or ""),
            upstream_base=(env.get("GEMINI_UPSTREAM_BASE") or DEFAULT_UPSTREAM_BASE).strip().rstrip("/"),
            api_version=(env.get("GEMINI_API_VERSION") or "v1beta").strip().strip("/"),
            mount_prefix=(env.get("GEMINI_PROXY_MOUNT_PREFIX") or DEFAULT_MOUNT_PREFIX).strip().rstrip("/"),
            timeout_s=_to_float(env.get("GEMINI_PROXY_TIMEOUT_S"), 30.0),
            canonical_model=canonical,
            model_aliases=model_aliases,
            generation_defaults=dict(gen_defaults),
            override_generation_config=override,
        )
