"""
Pure game logic (no HTTP, no storage).
We compute two feedback numbers for each guess:
- bulls: how many indices are exactly correct (right digit, right place)
- cows: how many guessed digits appear in the secret, but somewhere else

Codes never repeat a digit, so a digit is counted once: as a bull or as a cow.
"""

import random
from secrets import SystemRandom
from typing import List, Optional

from .types import CODE_LENGTH, DIGITS, Code, Feedback

_system_random = SystemRandom()


def is_valid_code(candidate) -> bool:
    """
    True only for exactly 3 decimal digits, all different.
      "398"  -> True
      "339"  -> False (repeated digit)
      "3a9"  -> False
      "3980" -> False
    """
    if not isinstance(candidate, str) or len(candidate) != CODE_LENGTH:
        return False
    for ch in candidate:
        # str.isdigit() also accepts things like superscripts, so compare directly
        if ch not in DIGITS:
            return False
    return len(set(candidate)) == CODE_LENGTH


def compute_feedback(secret: Code, guess: Code) -> Feedback:
    """
    Example:
      secret = "172"
      guess  = "127"
      bulls = 1  ('1' is in place)
      cows  = 2  ('2' and '7' are in the secret, but elsewhere)
    Order matters: the first argument is always the hidden code.
    """
    if len(secret) != CODE_LENGTH or len(guess) != CODE_LENGTH:
        raise ValueError(f"Secret and guess must both be {CODE_LENGTH} digits long.")

    bulls = 0
    cows = 0
    for i in range(CODE_LENGTH):
        if guess[i] == secret[i]:
            bulls += 1
        elif guess[i] in secret:
            cows += 1
    return Feedback(bulls, cows)


def generate_code(rng: Optional[random.Random] = None) -> Code:
    """
    Draw 3 different digits from 0..9. Sampling without replacement means the
    result is unique by construction, no retry loop needed.
    """
    rng = rng or _system_random
    picked: List[str] = rng.sample(DIGITS, CODE_LENGTH)
    return "".join(picked)


def is_win(feedback: Feedback) -> bool:
    return feedback.bulls == CODE_LENGTH


def format_feedback_message(feedback: Feedback) -> str:
    """Chat-friendly wording, without saying which digits matched."""
    if is_win(feedback):
        return "Correct! Code cracked."

    parts = []
    if feedback.bulls > 0:
        parts.append(f"{feedback.bulls} Correct Position")
    if feedback.cows > 0:
        parts.append(f"{feedback.cows} Wrong Position")

    if not parts:
        return "No matches."
    return ", ".join(parts)
