"""Layered client configuration.

Sources, later wins:

1. ``DEFAULTS`` (base URL, retry policy)
2. a JSON or YAML file named by ``WATERCRAWL_CONFIG_FILE``
3. environment variables (``WATERCRAWL_API_KEY``, ``WATERCRAWL_BASE_URL``)
4. overrides passed to :func:`get_client_config` (``None`` values ignored)

Mapping sections such as ``retry`` merge key by key. A ``.env`` file (path
from ``DOTENV_FILE``, default ``./.env``) is read once per process before the
environment is consulted; it only fills variables that are unset or hold a
placeholder.

Example file::

    api_key: wc-...
    base_url: https://app.watercrawl.dev
    retry:
      max_attempts: 5
      delay_base: 1.5
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .defaults import (
    DEFAULT_RETRY_DELAY_BASE,
    DEFAULT_RETRY_MAX_ATTEMPTS,
    WATERCRAWL_DEFAULT_BASE_URL,
)
from .env import CONFIG_FILE_ENV, DOTENV_FILE_ENV, ENV_MAP, is_placeholder, resolve_env_value

DEFAULTS: Dict[str, Any] = {
    "base_url": WATERCRAWL_DEFAULT_BASE_URL,
    "retry": {
        "max_attempts": DEFAULT_RETRY_MAX_ATTEMPTS,
        "delay_base": DEFAULT_RETRY_DELAY_BASE,
    },
}

# (path, parsed content) of the last config file read.
_file_cache: Optional[Tuple[Optional[str], Dict[str, Any]]] = None
_dotenv_done = False


def _parse_dotenv_line(line: str) -> Optional[Tuple[str, str]]:
    line = line.strip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    return key, value.strip().strip("\"'")


def _load_dotenv_once() -> None:
    global _dotenv_done
    if _dotenv_done:
        return
    _dotenv_done = True
    path = Path(os.getenv(DOTENV_FILE_ENV, ".env"))
    if not path.is_file():
        return
    for raw in path.read_text(encoding="utf-8").splitlines():
        parsed = _parse_dotenv_line(raw)
        if parsed is None:
            continue
        key, value = parsed
        current = os.environ.get(key)
        if current is None or is_placeholder(current):
            os.environ[key] = value


def _read_config_file(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except ValueError:
        data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


def _load_external_config() -> Dict[str, Any]:
    """Parsed config file, re-read only when ``WATERCRAWL_CONFIG_FILE`` changes."""
    global _file_cache
    path = os.getenv(CONFIG_FILE_ENV)
    if _file_cache is not None and _file_cache[0] == path:
        return _file_cache[1]
    data = _read_config_file(Path(path)) if path and Path(path).is_file() else {}
    _file_cache = (path, data)
    return data


def _env_overrides() -> Dict[str, Any]:
    resolved = {field: resolve_env_value(field)[0] for field in ENV_MAP}
    return {field: value for field, value in resolved.items() if value is not None}


def _merge(cfg: Dict[str, Any], layer: Mapping[str, Any]) -> None:
    for key, value in layer.items():
        current = cfg.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            cfg[key] = {**current, **value}
        elif isinstance(value, Mapping):
            cfg[key] = dict(value)
        else:
            cfg[key] = value


def get_client_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged configuration as a fresh dict."""
    _load_dotenv_once()
    cfg: Dict[str, Any] = {}
    layers = (
        DEFAULTS,
        _load_external_config(),
        _env_overrides(),
        {k: v for k, v in (overrides or {}).items() if v is not None},
    )
    for layer in layers:
        _merge(cfg, layer)
    return cfg


def reset_config_cache() -> None:
    """Forget the cached config file and allow ``.env`` to be read again."""
    global _file_cache, _dotenv_done
    _file_cache = None
    _dotenv_done = False


__all__ = [
    "get_client_config",
    "reset_config_cache",
    "DEFAULTS",
]
