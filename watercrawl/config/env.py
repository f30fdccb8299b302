"""Environment variable names and lookup helpers for client settings.

Each config field has one canonical variable (``ENV_MAP``) and may accept
older names (``ENV_ALIASES``). The canonical name always wins when both are
set. Lookups never raise; an unset field resolves to ``(None, None)``.
"""

from __future__ import annotations

import os
from typing import Dict, Iterator, Optional, Tuple

CONFIG_FILE_ENV = "WATERCRAWL_CONFIG_FILE"
DOTENV_FILE_ENV = "DOTENV_FILE"

ENV_MAP: Dict[str, str] = {
    "api_key": "WATERCRAWL_API_KEY",  # pragma: allowlist secret - env var name, not a secret
    "base_url": "WATERCRAWL_BASE_URL",
}

ENV_ALIASES: Dict[str, Tuple[str, ...]] = {
    "base_url": ("WATERCRAWL_API_URL",),
}

_PLACEHOLDER_MARKERS = ("placeholder", "changeme", "example", "your_api_key")


def is_placeholder(val: Optional[str]) -> bool:
    """Whether ``val`` looks like a template value rather than a real setting.

    Matches (case-insensitively) common template words and a ``test_`` prefix.
    """
    if val is None:
        return False
    text = str(val).strip().lower()
    return text.startswith("test_") or any(marker in text for marker in _PLACEHOLDER_MARKERS)


def get_env_var_candidates(field: str) -> Iterator[str]:
    """Variable names accepted for ``field``, canonical first."""
    seen = set()
    for name in (ENV_MAP.get(field), *ENV_ALIASES.get(field, ())):
        if name and name not in seen:
            seen.add(name)
            yield name


def resolve_env_value(field: str) -> Tuple[Optional[str], Optional[str]]:
    """Return ``(value, variable_name)`` from the first non-empty candidate."""
    for name in get_env_var_candidates(field):
        value = os.environ.get(name)
        if value:
            return value, name
    return None, None


__all__ = [
    "CONFIG_FILE_ENV",
    "DOTENV_FILE_ENV",
    "ENV_MAP",
    "ENV_ALIASES",
    "is_placeholder",
    "get_env_var_candidates",
    "resolve_env_value",
]
