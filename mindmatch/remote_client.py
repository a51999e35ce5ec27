"""
- HTTP call with clear fallback
Ask a hosted model (Gemini REST API) for the opponent's next guess. If anything
goes wrong (no key, no internet, timeout, bad response, illegal guess), we fall
back to the local heuristic so the game never stalls.
"""

import json
import logging
from typing import Optional, Tuple

import requests

from . import config
from .engine import is_valid_code
from .strategy import GuessProvider, HeuristicGuessProvider
from .types import Code, History

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"


def build_prompt(history: History) -> str:
    lines = []
    for i, (guess, (bulls, cows)) in enumerate(history, start=1):
        lines.append(
            f"Guess {i}: {guess} -> Result: "
            f"{bulls} Correct Pos, {cows} Wrong Pos"
        )
    history_text = "\n".join(lines) if lines else "(no guesses yet)"

    return (
        "You are playing a number guessing game (Bulls and Cows) against a human.\n"
        "The secret code is 3 unique digits (0-9).\n\n"
        "Here is the history of your attempts to guess the human's secret number:\n"
        f"{history_text}\n\n"
        "Based on this, generate your next valid guess (3 unique digits).\n"
        "Also provide a short, competitive, witty, or analytical one-sentence remark "
        "(banter) about your move.\n"
        "If this is the first turn, just pick 3 random unique digits and say hello.\n"
        'Return JSON: {"guess": "<3 digits>", "banter": "<text>"}'
    )


def parse_reply(body: dict) -> Tuple[Code, str]:
    """
    The reply looks like:
      {"candidates": [{"content": {"parts": [{"text": "{\"guess\": \"123\", ...}"}]}}]}
    Raises ValueError when anything is missing or the guess is illegal.
    """
    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ValueError("Unexpected response shape from model.") from exc

    result = json.loads(text)
    if not isinstance(result, dict):
        raise ValueError("Model reply is not a JSON object.")

    guess = str(result.get("guess", "")).strip()
    if not is_valid_code(guess):
        raise ValueError(f"Model proposed an illegal guess: {guess!r}")

    banter = str(result.get("banter") or "").strip()
    return guess, banter or guess


class RemoteGuessProvider:
    """Same contract as the heuristic, but fallible. Failures never leave this class."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        fallback: Optional[GuessProvider] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.model = model or config.GEMINI_MODEL
        # keep network quick; if it takes too long, we just fall back
        self.timeout = timeout if timeout is not None else config.REMOTE_TIMEOUT_SECONDS
        self.fallback = fallback or HeuristicGuessProvider()

    def fetch_guess(self, history: History) -> Tuple[Code, str]:
        if not self.api_key:
            raise RuntimeError("GEMINI_API_KEY is not set.")

        payload = {
            "contents": [{"parts": [{"text": build_prompt(history)}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": {
                    "type": "OBJECT",
                    "properties": {
                        "guess": {"type": "STRING", "description": "The 3-digit guess string"},
                        "banter": {"type": "STRING", "description": "Short chat message to the player"},
                    },
                    "required": ["guess", "banter"],
                },
            },
        }

        response = requests.post(
            GEMINI_URL.format(model=self.model),
            headers={"x-goog-api-key": self.api_key},
            json=payload,
            timeout=self.timeout,
        )
        # If the response was not 2xx, this will raise an error
        response.raise_for_status()
        return parse_reply(response.json())

    def next_guess(self, history: History) -> Tuple[Code, str]:
        try:
            return self.fetch_guess(history)
        except Exception as exc:
            # Fallback: whatever went wrong, the local heuristic still answers.
            # Log the error type only, never the request details
            logger.warning("Remote guess failed (%s); using local heuristic.", type(exc).__name__)
            return self.fallback.next_guess(history)
