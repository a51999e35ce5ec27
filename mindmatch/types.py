"""
Labels for clarity.
"""

from typing import List, Literal, NamedTuple, Sequence

Digit = str  # '0' -> '9'
Code = str  # 3 unique digits, ex. "398"
GameStatus = Literal["playing", "game_over"]
Player = Literal["user", "opponent"]
Sender = Literal["user", "opponent", "system"]

DIGITS: List[Digit] = list("0123456789")
CODE_LENGTH = 3


class Feedback(NamedTuple):
    bulls: int  # right digit, right place
    cows: int  # right digit, wrong place


class TurnRecord(NamedTuple):
    guess: Code
    feedback: Feedback


History = Sequence[TurnRecord]
