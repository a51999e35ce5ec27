"""
Explicit validation & Pydantic models
- Models are used to validate and serialize/deserialize data
  exchanged between the client and server.
- Defines the structure of API requests and responses.
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

from .engine import is_valid_code


def _check_code(value: str) -> str:
    value = value.strip()
    if not is_valid_code(value):
        raise ValueError("Enter 3 unique digits (e.g. 398).")
    return value


# 1. Start a game with the player's own secret
class NewGameRequest(BaseModel):
    secret: str = Field(..., description="Your secret: 3 unique digits. Never shown to the opponent.")

    @field_validator("secret")
    @classmethod
    def validate_secret(cls, secret: str) -> str:
        return _check_code(secret)

    model_config = {"json_schema_extra": {"examples": [{"secret": "398"}]}}


# 2. Validates player's guess
class GuessRequest(BaseModel):
    guess: str = Field(..., description="3 unique digits")

    @field_validator("guess")
    @classmethod
    def validate_guess(cls, guess: str) -> str:
        return _check_code(guess)

    model_config = {"json_schema_extra": {"examples": [{"guess": "123"}]}}


# 3. Feedback for one guess
class FeedbackOut(BaseModel):
    bulls: int = Field(..., description="Right digit, right position")
    cows: int = Field(..., description="Right digit, wrong position")
    message: str = Field(..., description="Readable feedback, ex. '1 Correct Position, 2 Wrong Position'")


class TurnOut(BaseModel):
    guess: str = Field(..., description="The guessed code")
    feedback: FeedbackOut


# 4. One line of the match transcript
class MessageOut(BaseModel):
    id: str
    sender: Literal["user", "opponent", "system"]
    text: str
    is_guess: bool = False
    guess: Optional[str] = None
    feedback: Optional[FeedbackOut] = None
    timestamp: float


# 5. Represents the overall state of the match
class GameState(BaseModel):
    game_id: str = Field(..., description="Unique ID for the game")
    status: Literal["playing", "game_over"] = Field(..., description="Current state of the game")
    turn: Literal["user", "opponent"] = Field(..., description="Who moves next")
    winner: Optional[Literal["user", "opponent"]] = Field(None, description="Set once the game is over")
    user_history: List[TurnOut] = Field(..., description="Your guesses against the opponent's code")
    opponent_history: List[TurnOut] = Field(..., description="Opponent guesses against your code")
    messages: List[MessageOut] = Field(..., description="Chat-style transcript")
    opponent_secret: Optional[str] = Field(None, description="Revealed only when the game is over")


# 6. Result of a guess (and the opponent's reply, if the game went on)
class GuessResponse(BaseModel):
    status: Literal["playing", "game_over"]
    turn: Literal["user", "opponent"]
    winner: Optional[Literal["user", "opponent"]] = None
    feedback: Optional[FeedbackOut] = Field(None, description="Feedback on your guess")
    opponent_guess: Optional[str] = Field(None, description="Opponent's reply guess")
    opponent_feedback: Optional[FeedbackOut] = Field(None, description="How the reply scored on your code")
    opponent_commentary: Optional[str] = Field(None, description="Opponent banter, no game meaning")
    opponent_secret: Optional[str] = Field(None, description="Revealed only when the game is over")
    note: Optional[str] = Field(None, description="Extra note (ex. 'Game over. No more guesses.')")


# 7. Scoreboard
class StatsOut(BaseModel):
    games_started: int = Field(..., description="Games started since the server came up")
    user_wins: int = Field(..., description="Games you won")
    opponent_wins: int = Field(..., description="Games the opponent won")
    current_streak: int = Field(..., description="Current consecutive wins")
    best_streak: int = Field(..., description="Best consecutive wins")
    fastest_win_guesses: Optional[int] = Field(None, description="Fewest guesses you needed to win")
