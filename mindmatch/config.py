"""
Single place to:
- Read settings from env (and a local .env during development)
- Decide which opponent strategy the API uses
- Configure logging once for the whole app

Why: keeps env handling consistent and easy to override in tests.
"""

import logging
import os

from dotenv import load_dotenv

# 1) Load env vars from .env if present
# dev convenience; in prod the platform injects env vars
load_dotenv()

STRATEGIES = ("heuristic", "consistent", "remote")

# 2) Pull the settings (all optional, sensible defaults)
APP_ENV = os.getenv("APP_ENV", "local")
OPPONENT_STRATEGY = os.getenv("OPPONENT_STRATEGY", "heuristic").strip().lower()
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or None
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
REMOTE_TIMEOUT_SECONDS = float(os.getenv("REMOTE_TIMEOUT_SECONDS", "5.0"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

if OPPONENT_STRATEGY not in STRATEGIES:
    raise RuntimeError(
        f"OPPONENT_STRATEGY must be one of {', '.join(STRATEGIES)} (got {OPPONENT_STRATEGY!r})."
    )


# 3) Logging: plain stdlib logging, one logger per module
def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
