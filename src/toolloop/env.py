"""
Lightweight environment variable loader and credential lookup.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, Mapping, Optional, Union

from .models import ProviderKind

logger = logging.getLogger(__name__)

# Environment variables consulted per provider, in priority order.
CREDENTIAL_ENV_VARS: Dict[ProviderKind, tuple] = {
    ProviderKind.OPENAI: ("OPENAI_API_KEY",),
    ProviderKind.GOOGLE: ("GEMINI_API_KEY", "GOOGLE_API_KEY"),
    ProviderKind.ANTHROPIC: ("ANTHROPIC_API_KEY",),
    ProviderKind.OPENROUTER: ("OPENROUTER_API_KEY",),
}

Credentials = Dict[ProviderKind, str]
CredentialsInput = Mapping[Union[ProviderKind, str], str]


def load_env_if_present(candidate_paths: Iterable[Path]) -> Optional[Path]:
    """Load key=value pairs from the first .env-style file that exists."""
    for env_path in candidate_paths:
        if not env_path.exists() or not env_path.is_file():
            continue
        try:
            lines = env_path.read_text().splitlines()
        except OSError as exc:
            logger.warning("Could not read %s: %s", env_path, exc)
            continue
        for line in lines:
            stripped = line.strip()
            if not stripped or stripped.startswith("#") or "=" not in stripped:
                continue
            key, value = stripped.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            # Explicit environment variables take precedence.
            if key and key not in os.environ:
                os.environ[key] = value
        logger.debug("Loaded environment from %s", env_path)
        return env_path
    return None


def load_default_env() -> Optional[Path]:
    """Load from common locations: cwd/.env and up to two parent directories."""
    cwd = Path.cwd()
    return load_env_if_present([cwd / ".env", cwd.parent / ".env", cwd.parent.parent / ".env"])


def normalize_credentials(credentials: Optional[CredentialsInput]) -> Credentials:
    """Accept ``ProviderKind`` or plain string keys and drop empty secrets."""
    normalized: Credentials = {}
    for key, secret in (credentials or {}).items():
        if not secret:
            continue
        try:
            kind = key if isinstance(key, ProviderKind) else ProviderKind(str(key).lower())
        except ValueError:
            logger.warning("Ignoring credential for unknown provider '%s'", key)
            continue
        normalized[kind] = secret
    return normalized


def credentials_from_env(load_dotenv_file: bool = True) -> Credentials:
    """Collect provider secrets from the environment (after loading a .env file)."""
    if load_dotenv_file:
        load_default_env()
    credentials: Credentials = {}
    for kind, names in CREDENTIAL_ENV_VARS.items():
        for name in names:
            value = os.getenv(name)
            if value:
                credentials[kind] = value
                break
    return credentials


def generic_openai_base_url() -> Optional[str]:
    """Base URL of a generic OpenAI-compatible endpoint, when one is configured."""
    base_url = os.getenv("GENERIC_OPEN_AI_BASE_PATH")
    if os.getenv("LLM_PROVIDER") == "generic-openai" and base_url:
        return base_url
    return None


__all__ = [
    "CREDENTIAL_ENV_VARS",
    "Credentials",
    "CredentialsInput",
    "load_env_if_present",
    "load_default_env",
    "normalize_credentials",
    "credentials_from_env",
    "generic_openai_base_url",
]
