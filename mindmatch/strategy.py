"""
Opponent guessing strategy.

The opponent only ever sees its own guesses and the feedback they earned.
Everything here is recomputed from that history on every call, so the same
history always gives the same pool of eligible digits (the guess itself may
still vary, because picks and ordering are random).

Rules replayed over the history:
- a turn scored (0 bulls, 0 cows) proves none of its digits are in the secret,
  so those digits are excluded for good
- among the remaining digits, prefer ones never guessed before (new information)
- once fresh digits run out, refill from the rest of the pool and shuffle

Bulls are only used by the caller to spot a win; the heuristic does not pin a
digit to a position. ConsistentGuessProvider is the stronger opt-in variant.
"""

import logging
import random
from itertools import permutations
from secrets import SystemRandom
from typing import List, Optional, Protocol, Set, Tuple

from .engine import compute_feedback, generate_code
from .types import CODE_LENGTH, DIGITS, Code, History

logger = logging.getLogger(__name__)

_system_random = SystemRandom()

OPENING_REMARKS = [
    "Hello! Let's see how well you hid your code.",
    "First move is a shot in the dark. Here goes.",
    "Nice to meet you. I'll start with a random probe.",
]

COMMENTARY = [
    "Narrowing it down...",
    "Let me try this one.",
    "I'm getting closer, I can feel it.",
    "Interesting feedback. Adjusting.",
    "Calculating... done.",
    "Your code won't stay hidden for long.",
]


def excluded_digits(history: History) -> Set[str]:
    """Digits proven absent: every digit of every guess that scored (0, 0)."""
    excluded: Set[str] = set()
    for guess, (bulls, cows) in history:
        if bulls + cows == 0:
            excluded.update(guess)
    return excluded


def guessed_digits(history: History) -> Set[str]:
    used: Set[str] = set()
    for guess, _ in history:
        used.update(guess)
    return used


def candidate_pool(history: History) -> List[str]:
    """Digits 0..9 that have not been excluded, in ascending order."""
    excluded = excluded_digits(history)
    return [d for d in DIGITS if d not in excluded]


def next_guess(history: History, rng: Optional[random.Random] = None) -> Tuple[Code, str]:
    """
    Return (guess, commentary). Never raises for a degenerate history and
    always returns 3 unique digits.
    """
    rng = rng or _system_random

    # 1. Nothing learned yet
    if not history:
        return generate_code(rng), rng.choice(OPENING_REMARKS)

    # 2. Remove proven-absent digits
    pool = candidate_pool(history)

    # 3. Contradictory history: keep what is left, top up from excluded digits
    if len(pool) < CODE_LENGTH:
        logger.debug("Candidate pool has %d digit(s); ignoring exclusions to fill.", len(pool))
        extra = [d for d in DIGITS if d not in pool]
        rng.shuffle(extra)
        pool = pool + extra[: CODE_LENGTH - len(pool)]

    # 4. Prefer digits never guessed before
    used = guessed_digits(history)
    fresh = [d for d in pool if d not in used]

    if len(fresh) >= CODE_LENGTH:
        picks = rng.sample(fresh, CODE_LENGTH)
    else:
        # 5. Not enough fresh ones: fill from the rest of the pool, then shuffle
        rest = [d for d in pool if d not in fresh]
        picks = fresh + rng.sample(rest, CODE_LENGTH - len(fresh))
        rng.shuffle(picks)

    return "".join(picks), rng.choice(COMMENTARY)


def consistent_codes(history: History) -> List[Code]:
    """Every code that would have produced exactly the recorded feedback."""
    out: List[Code] = []
    for combo in permutations(DIGITS, CODE_LENGTH):
        code = "".join(combo)
        ok = True
        for guess, feedback in history:
            if compute_feedback(code, guess) != tuple(feedback):
                ok = False
                break
        if ok:
            out.append(code)
    return out


class GuessProvider(Protocol):
    def next_guess(self, history: History) -> Tuple[Code, str]:
        ...


class HeuristicGuessProvider:
    """Local digit-elimination heuristic. Always available."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng

    def next_guess(self, history: History) -> Tuple[Code, str]:
        return next_guess(history, self.rng)


class ConsistentGuessProvider:
    """
    Stronger variant: choose at random among codes that agree with all past
    feedback, positions included. Every guess removes itself from the set and
    the real secret always stays in it, so it cannot take more than 720 turns.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or _system_random
        self.fallback = HeuristicGuessProvider(rng)

    def next_guess(self, history: History) -> Tuple[Code, str]:
        if not history:
            return self.fallback.next_guess(history)

        candidates = consistent_codes(history)
        if not candidates:
            # Feedback contradicts itself (bad scorer / corrupted history)
            logger.warning("No code matches the recorded feedback; using digit heuristic.")
            return self.fallback.next_guess(history)

        guess = self.rng.choice(candidates)
        if len(candidates) == 1:
            return guess, "Only one possibility left."
        return guess, self.rng.choice(COMMENTARY)
