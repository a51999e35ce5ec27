"""
In-memory store
Holds match state in memory: both secrets, whose turn it is, each side's
guess history and a chat-style transcript. Nothing outlives the process.
"""

import logging
from dataclasses import dataclass, field, replace
from threading import RLock
from time import time
from typing import Dict, List, Optional
from uuid import uuid4

from .engine import compute_feedback, is_valid_code, is_win
from .strategy import GuessProvider, next_guess
from .types import Code, Feedback, GameStatus, Player, Sender, TurnRecord

logger = logging.getLogger(__name__)


@dataclass
class Message:
    sender: Sender
    text: str
    is_guess: bool = False
    guess: Optional[Code] = None
    feedback: Optional[Feedback] = None
    id: str = field(default_factory=lambda: uuid4().hex[:8])
    timestamp: float = field(default_factory=time)


@dataclass
class Game:
    id: str
    user_secret: Code
    opponent_secret: Code
    turn: Player = "user"
    status: GameStatus = "playing"
    winner: Optional[Player] = None
    # user's guesses, scored against opponent_secret
    user_history: List[TurnRecord] = field(default_factory=list)
    # opponent's guesses, scored against user_secret
    opponent_history: List[TurnRecord] = field(default_factory=list)
    messages: List[Message] = field(default_factory=list)
    created_at: float = field(default_factory=time)
    updated_at: float = field(default_factory=time)


# Scoreboard, this process only
@dataclass
class Stats:
    games_started: int = 0
    user_wins: int = 0
    opponent_wins: int = 0

    current_streak: int = 0
    best_streak: int = 0

    fastest_win_guesses: Optional[int] = None


class GameStore:
    def __init__(self) -> None:
        self._games: Dict[str, Game] = {}
        self._lock = RLock()
        self._stats = Stats()

    def create(self, user_secret: Code, opponent_secret: Code, first_turn: Player = "user") -> Game:
        if not is_valid_code(user_secret):
            raise ValueError("Secret must be 3 unique digits (e.g. 398).")
        if not is_valid_code(opponent_secret):
            raise ValueError("Opponent secret must be 3 unique digits.")

        new_id = str(uuid4())
        game = Game(
            id=new_id,
            user_secret=user_secret,
            opponent_secret=opponent_secret,
            turn=first_turn,
        )
        starter = "You start" if first_turn == "user" else "Opponent starts"
        game.messages.append(Message("system", f"Game Started! Secret codes locked. {starter}."))

        with self._lock:
            self._games[new_id] = game
            self._stats.games_started += 1

        logger.info("Game %s started, first turn: %s", new_id, first_turn)
        return game

    def get(self, game_id: str) -> Optional[Game]:
        with self._lock:
            return self._games.get(game_id)

    def delete(self, game_id: str) -> bool:
        with self._lock:
            return self._games.pop(game_id, None) is not None

    def user_guess(self, game_id: str, guess: Code) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None

            if game.status != "playing":
                # Game already ended, ignore extra guesses
                return game

            if game.turn != "user":
                raise ValueError("It is not your turn.")
            if not is_valid_code(guess):
                raise ValueError("Guess must be 3 unique digits.")

            feedback = compute_feedback(game.opponent_secret, guess)
            game.user_history.append(TurnRecord(guess, feedback))
            game.messages.append(Message("user", guess, is_guess=True, guess=guess, feedback=feedback))

            if is_win(feedback):
                game.messages.append(Message("system", "You cracked the code! You Win!"))
                self._finish(game, winner="user")
            else:
                game.turn = "opponent"

            game.updated_at = time()
            return game

    def opponent_turn(self, game_id: str, provider: GuessProvider) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            if game.status != "playing" or game.turn != "opponent":
                return game
            history = list(game.opponent_history)

        # The provider may be a slow remote call, so other games must not wait on it
        try:
            guess, commentary = provider.next_guess(history)
        except Exception as exc:
            logger.warning("Provider failed (%s); using heuristic.", type(exc).__name__)
            guess, commentary = next_guess(history)
        if not is_valid_code(guess):
            # A provider must never break the game; the heuristic is always legal
            logger.warning("Provider returned illegal guess %r; using heuristic.", guess)
            guess, commentary = next_guess(history)

        with self._lock:
            game = self._games.get(game_id)
            if game is None:
                return None
            # Turn was already played (or the game ended) while we were thinking
            if (
                game.status != "playing"
                or game.turn != "opponent"
                or len(game.opponent_history) != len(history)
            ):
                return game

            game.messages.append(Message("system", "Opponent is thinking..."))

            feedback = compute_feedback(game.user_secret, guess)
            game.opponent_history.append(TurnRecord(guess, feedback))
            game.messages.append(
                Message("opponent", commentary or guess, is_guess=True, guess=guess, feedback=feedback)
            )

            if is_win(feedback):
                game.messages.append(
                    Message("system", f"Opponent cracked your code ({game.user_secret})! You Lose.")
                )
                self._finish(game, winner="opponent")
            else:
                game.turn = "user"

            game.updated_at = time()
            return game

    # Updates status and scoreboard exactly once per game
    def _finish(self, game: Game, winner: Player) -> None:
        game.status = "game_over"
        game.winner = winner

        if winner == "user":
            self._stats.user_wins += 1
            self._stats.current_streak += 1
            if self._stats.current_streak > self._stats.best_streak:
                self._stats.best_streak = self._stats.current_streak

            guesses_used = len(game.user_history)
            if self._stats.fastest_win_guesses is None or guesses_used < self._stats.fastest_win_guesses:
                self._stats.fastest_win_guesses = guesses_used
        else:
            self._stats.opponent_wins += 1
            self._stats.current_streak = 0

        logger.info("Game %s over, winner: %s", game.id, winner)

    def get_stats(self) -> Stats:
        # a snapshot, so callers never see a half-updated scoreboard
        with self._lock:
            return replace(self._stats)

    def reset_stats(self) -> None:
        with self._lock:
            self._stats = Stats()
