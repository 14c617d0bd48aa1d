# aoc_runner/core/env.py
from __future__ import annotations
import os
from dotenv import load_dotenv

SESSION_KEY = "AOC_SESSION"

KNOWN_KEYS = [
    SESSION_KEY,         # session cookie, takes precedence over the stored token
    "AOC_CONFIG_DIR",    # where config.json lives
    "AOC_BASE_URL",      # site root, for mirrors and tests
]

def _mask(value: str) -> str:
    return f"{value[:4]}…" if len(value) > 4 else "…"

def load_env(dotenv_path: str | None = None) -> dict[str, str]:
    """
    Read .env without overriding the real environment.

    Returns the known keys that ended up set, secrets masked, for debug output.
    """
    path = dotenv_path or os.getenv("DOTENV_PATH", ".env")
    load_dotenv(path, override=False)
    return {key: _mask(os.environ[key]) for key in KNOWN_KEYS if os.environ.get(key)}

def session_token(stored: str | None = None) -> str | None:
    """The session token to use: AOC_SESSION wins over the stored one."""
    return os.getenv(SESSION_KEY) or stored
