"""Mechanism engine configuration.

Every setting is read from the environment once, at import, with a safe
default so the service starts without any variables set.
"""

from __future__ import annotations

import logging
import os
from typing import List, Optional

# -----------------------------
# helpers
# -----------------------------
def _env(key: str, default: str = "") -> str:
    v = os.getenv(key)
    return default if v is None else str(v).strip()

def _env_bool(key: str, default: bool = False) -> bool:
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "y", "on"}

def _env_int(key: str, default: int) -> int:
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return default
    try:
        return int(str(v).strip())
    except ValueError:
        return default

def _env_list(key: str, default: Optional[List[str]] = None, sep: str = ",") -> List[str]:
    if default is None:
        default = []
    v = os.getenv(key)
    if v is None or str(v).strip() == "":
        return list(default)
    return [s.strip() for s in str(v).split(sep) if s.strip()]


# -----------------------------
# logging
# -----------------------------
LOG_LEVEL = _env("LOG_LEVEL", "INFO").upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger("mechanism-engine")


# -----------------------------
# service
# -----------------------------
APP_TITLE = _env("APP_TITLE", "Mechanism Predictor API")

HOST = _env("HOST", "0.0.0.0")
PORT = _env_int("PORT", 8000)

CORS_ORIGINS = _env_list(
    "CORS_ORIGINS",
    [
        "https://aaronbrennan1.github.io",
        "http://localhost:3000",  # local front end
    ],
)


# -----------------------------
# engine
# -----------------------------
# Size of the memo for parsed notations; 0 turns memoisation off.
PARSE_CACHE_SIZE = max(0, _env_int("PARSE_CACHE_SIZE", 512))

# RDKit prints every rejected notation to stderr unless silenced.
RDKIT_LOGS = _env_bool("RDKIT_LOGS", False)
