from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

__all__ = ["DEFAULT_MODEL", "DEFAULT_SYSTEM_PROMPT", "Settings", "get_api_key"]

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_SYSTEM_PROMPT = "You are a helpful API tutor."

_API_KEY_ENV = "OPENAI_API_KEY"


def get_api_key() -> str:
    """Return the OpenAI API key or raise RuntimeError."""
    load_dotenv()
    key = os.getenv(_API_KEY_ENV)
    if not key:
        raise RuntimeError(f"{_API_KEY_ENV} missing")
    return key


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read from the environment (and ``.env``)."""

    api_key: Optional[str] = None
    default_model: str = DEFAULT_MODEL
    base_url: Optional[str] = None
    timeout: float = 60.0
    max_retries: int = 2
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        env = os.environ
        return cls(
            api_key=env.get(_API_KEY_ENV) or None,
            default_model=env.get("OPENAI_MODEL") or DEFAULT_MODEL,
            base_url=env.get("OPENAI_BASE_URL") or None,
            timeout=float(env.get("OPENAI_TIMEOUT", "60")),
            max_retries=int(env.get("OPENAI_MAX_RETRIES", "2")),
            host=env.get("API_TUTOR_HOST", "127.0.0.1"),
            port=int(env.get("API_TUTOR_PORT", "8000")),
            log_level=env.get("API_TUTOR_LOG_LEVEL", "INFO").upper(),
        )

    def require_api_key(self) -> str:
        return self.api_key or get_api_key()
