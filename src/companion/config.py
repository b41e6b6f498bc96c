"""Process-wide configuration.

Secrets come from the environment, tunables from an optional YAML file:

companion.yaml supports:
- model: gemini-2.0-flash
- endpoint: https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent
- timeout: 30
- on_goal_lookup_failure: degrade   # or "fail"

The handler receives the resulting ProxyConfig at construction and never
reads os.environ itself.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError
from .logging_util import get_logger
from .types import DEFAULT_ENDPOINT, DEFAULT_MODEL, ProxyConfig

logger = get_logger(__name__)

_POLICIES = ("degrade", "fail")

def sanitize_api_key(raw: str) -> str:
    # Header encoding is latin-1; strip pasted quotes and smart quotes.
    k = (raw or "").strip()
    k = k.strip(' "\'`')
    k = k.strip("“”‘’")
    return k

def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to load YAML: %s (%s)", path, e)
        return {}
    if not isinstance(data, dict):
        logger.error("Ignoring YAML settings that are not a mapping: %s", path)
        return {}
    return data

def settings_path(project_root: Path, environ: Mapping[str, str]) -> Path:
    override = (environ.get("COMPANION_CONFIG") or "").strip()
    if override:
        return Path(override)
    return project_root / "src" / "configs" / "companion.yaml"

def _to_timeout(v: Any, default: float) -> float:
    if v is None:
        return default
    try:
        t = float(v)
    except (TypeError, ValueError):
        raise ConfigurationError(f"timeout must be a number: {v!r}")
    if t <= 0:
        raise ConfigurationError(f"timeout must be positive: {v!r}")
    return t

def load_config(project_root: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> ProxyConfig:
    """Build a ProxyConfig from the environment plus the optional YAML settings.

    Missing secrets are not an error here: they surface as ConfigurationError
    on each request, after CORS preflight has been answered.
    """
    # <root>/src/companion/config.py -> parents[2] == <root>
    project_root = project_root or Path(__file__).resolve().parents[2]
    environ = os.environ if environ is None else environ

    settings = _load_yaml(settings_path(project_root, environ))

    policy = str(settings.get("on_goal_lookup_failure") or "degrade").strip().lower()
    if policy not in _POLICIES:
        raise ConfigurationError(f"on_goal_lookup_failure must be one of {_POLICIES}: {policy!r}")

    return ProxyConfig(
        gemini_api_key=sanitize_api_key(environ.get("GEMINI_API_KEY") or ""),
        supabase_url=(environ.get("SUPABASE_URL") or "").strip().rstrip("/"),
        supabase_service_key=sanitize_api_key(environ.get("SUPABASE_SERVICE_ROLE_KEY") or ""),
        model=str(settings.get("model") or DEFAULT_MODEL).strip(),
        endpoint=str(settings.get("endpoint") or DEFAULT_ENDPOINT).strip(),
        timeout=_to_timeout(settings.get("timeout"), 30.0),
        on_goal_lookup_failure=policy,  # type: ignore
    )
