'''
MindMatch API: Bulls and Cows duel against an automated opponent

Endpoints:
POST   /games              -> lock in your secret and start a match
GET    /games/{id}         -> read state, histories & transcript
POST   /games/{id}/guess   -> submit a guess (the opponent replies in the same call)
DELETE /games/{id}         -> abandon a match

Extras:
GET  /stats                -> scoreboard
POST /stats/reset          -> reset scoreboard

Sessions live in memory only; restarting the server forgets them.
'''

from secrets import SystemRandom

from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware

from . import config
from .engine import generate_code, format_feedback_message
from .store import GameStore, Game, Message
from .strategy import GuessProvider, HeuristicGuessProvider, ConsistentGuessProvider
from .remote_client import RemoteGuessProvider
from .types import Player, TurnRecord, Feedback

from .schemas import (
    NewGameRequest,
    GuessRequest,
    GuessResponse,
    GameState,
    FeedbackOut,
    TurnOut,
    MessageOut,
    StatsOut,
)

_system_random = SystemRandom()

app = FastAPI(title="MindMatch API", version="1.0.0")

# Allow everything in dev so the docs and a front-end work easily
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"]
)

# --- Dev convenience: log to the console locally ---
if config.APP_ENV == "local":
    @app.on_event("startup")
    def _dev_configure_logging():
        config.configure_logging()

# One store per process
_store = GameStore()


def get_store() -> GameStore:
    return _store


def get_guess_provider() -> GuessProvider:
    """The opponent's brain is picked here by config, never inside the core."""
    if config.OPPONENT_STRATEGY == "remote":
        return RemoteGuessProvider()
    if config.OPPONENT_STRATEGY == "consistent":
        return ConsistentGuessProvider()
    return HeuristicGuessProvider()


def pick_first_turn() -> Player:
    return "user" if _system_random.random() < 0.5 else "opponent"

# ---------------- DTO builders ----------------

def _to_feedback_out(feedback: Feedback) -> FeedbackOut:
    return FeedbackOut(
        bulls=feedback.bulls,
        cows=feedback.cows,
        message=format_feedback_message(feedback),
    )

def _to_turn_out(record: TurnRecord) -> TurnOut:
    return TurnOut(guess=record.guess, feedback=_to_feedback_out(record.feedback))

def _to_message_out(msg: Message) -> MessageOut:
    return MessageOut(
        id=msg.id,
        sender=msg.sender,
        text=msg.text,
        is_guess=msg.is_guess,
        guess=msg.guess,
        feedback=_to_feedback_out(msg.feedback) if msg.feedback is not None else None,
        timestamp=msg.timestamp,
    )

def _to_game_state(game: Game) -> GameState:
    return GameState(
        game_id=game.id,
        status=game.status,
        turn=game.turn,
        winner=game.winner,
        user_history=[_to_turn_out(r) for r in game.user_history],
        opponent_history=[_to_turn_out(r) for r in game.opponent_history],
        messages=[_to_message_out(m) for m in game.messages],
        # Keep the opponent's code hidden until the match is decided
        opponent_secret=game.opponent_secret if game.status == "game_over" else None,
    )

# ---------------- Routes ----------------

@app.post("/games", response_model=GameState, summary="Start a new match")
def start_game(
    payload: NewGameRequest,
    store: GameStore = Depends(get_store),
    provider: GuessProvider = Depends(get_guess_provider),
) -> GameState:
    """
    Your secret is locked in, the opponent draws its own, and a coin flip
    decides who starts. If the opponent starts, its first guess is already
    in the returned transcript.
    """
    try:
        game = store.create(payload.secret, generate_code(), pick_first_turn())
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))

    if game.turn == "opponent":
        game = store.opponent_turn(game.id, provider)
        if not game:
            raise HTTPException(status_code=404, detail="Game not found")

    return _to_game_state(game)

@app.get("/games/{game_id}", response_model=GameState, summary="Get current match state")
def get_game(
    game_id: str,
    store: GameStore = Depends(get_store),
) -> GameState:
    game = store.get(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")
    return _to_game_state(game)

@app.post("/games/{game_id}/guess", response_model=GuessResponse, summary="Submit a guess")
def submit_guess(
    game_id: str,
    payload: GuessRequest,
    store: GameStore = Depends(get_store),
    provider: GuessProvider = Depends(get_guess_provider),
) -> GuessResponse:
    game = store.get(game_id)
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")

    if game.status == "game_over":
        return GuessResponse(
            status=game.status,
            turn=game.turn,
            winner=game.winner,
            opponent_secret=game.opponent_secret,
            note="Game over. No more guesses allowed.",
        )

    # store.user_guess() checks turn order & legality, then scores the guess
    try:
        game = store.user_guess(game_id, payload.guess)
    except ValueError as ve:
        raise HTTPException(status_code=400, detail=str(ve))
    if not game:
        raise HTTPException(status_code=404, detail="Game not found")

    user_record = game.user_history[-1]
    opponent_record = None
    commentary = None

    if game.status == "playing" and game.turn == "opponent":
        game = store.opponent_turn(game_id, provider)
        if not game:
            raise HTTPException(status_code=404, detail="Game not found")
        opponent_record = game.opponent_history[-1]
        commentary = next(m.text for m in reversed(game.messages) if m.sender == "opponent")

    return GuessResponse(
        status=game.status,
        turn=game.turn,
        winner=game.winner,
        feedback=_to_feedback_out(user_record.feedback),
        opponent_guess=opponent_record.guess if opponent_record else None,
        opponent_feedback=_to_feedback_out(opponent_record.feedback) if opponent_record else None,
        opponent_commentary=commentary,
        opponent_secret=game.opponent_secret if game.status == "game_over" else None,
        note=("Game over. No more guesses allowed." if game.status == "game_over" else None),
    )

@app.delete("/games/{game_id}", summary="Abandon a match")
def delete_game(game_id: str, store: GameStore = Depends(get_store)) -> dict:
    if not store.delete(game_id):
        raise HTTPException(status_code=404, detail="Game not found")
    return {"message": "Game removed."}

@app.get("/stats", response_model=StatsOut, summary="Get scoreboard")
def get_stats(store: GameStore = Depends(get_store)) -> StatsOut:
    stats = store.get_stats()
    return StatsOut(
        games_started=stats.games_started,
        user_wins=stats.user_wins,
        opponent_wins=stats.opponent_wins,
        current_streak=stats.current_streak,
        best_streak=stats.best_streak,
        fastest_win_guesses=stats.fastest_win_guesses,
    )

@app.post("/stats/reset", summary="Reset the scoreboard")
def reset_stats(store: GameStore = Depends(get_store)) -> dict:
    store.reset_stats()
    return {"message": "Stats reset."}
